"""Cyclephase: menstrual cycle phase estimation service."""
