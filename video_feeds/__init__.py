"""Aggregate the newest videos from YouTube and Rumble channel feeds."""
