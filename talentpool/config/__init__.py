"""Configuration for TalentPool."""
