"""
Standalone jobs for the top-lists service.

These run as Python scripts via cron / Cloud Scheduler, NOT inside the
FastAPI process.

Usage:
    python -m services.toplists.jobs.refresh_top_lists
    python -m services.toplists.jobs.refresh_top_lists --start 2026-10-01 --end 2026-10-31
"""
