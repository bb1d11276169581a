"""Store path schema.

users/{userId}/stats/*, users/{userId}/sessions/{sessionKey},
users/{userId}/events/{category}/{eventInstanceId}, users/{userId}/profile/*
attendance/{location}/{YYYY-MM-DD}/{sessionKey}
events/{eventId}, events/{eventId}/participants/{userId}
locations/{location}
"""
from __future__ import annotations

from datetime import date

from ..common.datetime_utils import format_day
from .tree_store import join_path

USERS = "users"
ATTENDANCE = "attendance"
EVENTS = "events"
LOCATIONS = "locations"


def user_path(user_id: str, *rest: object) -> str:
    return join_path(USERS, user_id, *rest)


def session_path(user_id: str, session_key: str) -> str:
    return user_path(user_id, "sessions", session_key)


def user_event_path(user_id: str, category: str, instance_id: str) -> str:
    return user_path(user_id, "events", category, instance_id)


def attendance_day_path(location_key: str, day: date) -> str:
    return join_path(ATTENDANCE, location_key, format_day(day))


def attendance_path(location_key: str, day: date, session_key: str) -> str:
    return join_path(attendance_day_path(location_key, day), session_key)


def event_path(event_id: str, *rest: object) -> str:
    return join_path(EVENTS, event_id, *rest)


def location_path(location_key: str) -> str:
    return join_path(LOCATIONS, location_key)
