import pytest

from talentpool.core.listing import filter_talents
from talentpool.models.listing import TalentFilter
from talentpool.models.profile import CandidateProfile


@pytest.fixture
def talents() -> list[CandidateProfile]:
    return [
        CandidateProfile(
            uid="ada",
            full_name="Ada Lovelace",
            headline="Senior Data Engineer",
            country="United Kingdom",
            years_of_experience=6,
            expected_monthly_rate_gbp=5000,
            availability="Full-time",
            cv_skills=["Python", "Machine Learning"],
            tech_stack="Spark, Airflow",
        ),
        CandidateProfile(
            uid="grace",
            full_name="Grace Hopper",
            headline="Backend Developer",
            country="United States",
            years_of_experience=3,
            expected_monthly_rate_gbp=7000,
            availability="Part-time",
            cv_skills=["COBOL", "Artificial Intelligence"],
        ),
        CandidateProfile(
            uid="linus",
            full_name="Linus Torvalds",
            headline="Kernel Hacker",
            country=None,
            years_of_experience=None,
            expected_monthly_rate_gbp=None,
            availability=None,
            tech_stack="C, Git",
        ),
    ]


def uids(profiles) -> list[str]:
    return [p.uid for p in profiles]


@pytest.mark.parametrize(
    "keyword, expected",
    [
        ("", ["ada", "grace", "linus"]),
        ("grace", ["grace"]),
        ("data engineer", ["ada"]),
        ("airflow", ["ada"]),
        ("ml", ["ada"]),
        ("ai", ["ada", "grace"]),  # "ai" is also a substring of "airflow"
        ("cobol & git", ["grace", "linus"]),
        ("rust & go", []),
    ],
)
def test_keyword(talents, keyword, expected):
    assert uids(filter_talents(talents, TalentFilter(keyword=keyword))) == expected


def test_location_substring(talents):
    assert uids(filter_talents(talents, TalentFilter(location="united"))) == ["ada", "grace"]
    assert uids(filter_talents(talents, TalentFilter(location="kingdom"))) == ["ada"]


def test_numeric_predicates_exclude_missing_values(talents):
    assert uids(filter_talents(talents, TalentFilter(min_experience=0))) == ["ada", "grace"]
    assert uids(filter_talents(talents, TalentFilter(min_experience=5))) == ["ada"]
    assert uids(filter_talents(talents, TalentFilter(max_rate=6000))) == ["ada"]


def test_availability_exact_match(talents):
    assert uids(filter_talents(talents, TalentFilter(availability="part-time"))) == ["grace"]
    assert uids(filter_talents(talents, TalentFilter(availability="Part"))) == []
    assert uids(filter_talents(talents, TalentFilter(availability="all"))) == ["ada", "grace", "linus"]


def test_predicates_are_and_combined(talents):
    filt = TalentFilter(keyword="ai", location="united states", max_rate=8000)
    assert uids(filter_talents(talents, filt)) == ["grace"]
