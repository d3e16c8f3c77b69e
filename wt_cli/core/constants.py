"""Static constants for the workout tracker CLI."""

from __future__ import annotations

DEFAULT_BASE_URL = "http://localhost:3000"

WORKOUTS_PATH = "/api/workouts"
TRAINING_PLANS_PATH = "/api/training-plans"

PENDING_WORKOUTS_KEY = "pendingWorkouts"
FOOD_GOALS_KEY = "foodGoals"

OFFLINE_ID_PREFIX = "offline-"

VALID_BANDS = ("green", "red", "black")
PLAN_STATUSES = ("active", "paused", "completed")
VIEW_MODES = ("current", "history", "all")
SEVERITIES = ("success", "warning", "error")

DEFAULT_FOOD_GOALS = {
    "carbs": 150.0,
    "protein": 120.0,
    "fat": 80.0,
    "calories": 2000.0,
}

RETRYABLE_STATUS_CODES = (429, 500, 502, 503, 504)

MSG_SAVED_OFFLINE = "Workout saved offline - will sync when internet is back"
MSG_ADDED = "Workout successfully added!"
MSG_UPDATED = "Workout successfully updated!"
MSG_OFFLINE_UPDATED = "Offline workout successfully updated!"
MSG_OFFLINE_UPDATE_FAILED = "Error updating offline workout"
MSG_MISSING_ID = "Error: Missing workout ID for offline update"
MSG_EDIT_OFFLINE = "Editing synced workouts is not available offline"
MSG_DELETED = "Workout successfully deleted!"
MSG_OFFLINE_DELETED = "Offline workout successfully deleted!"
MSG_DELETE_OFFLINE = "Deleting is not available offline"
MSG_NO_CONNECTION = "No internet connection"
MSG_SYNC_OK = "Synchronization successful!"
MSG_SYNC_FAILED = "Error during synchronization"
