"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Durable storage keys
DATA_KEY = "bricks_attendance_data"
MINIMAL_DATA_KEY = DATA_KEY + "_minimal"
SYNC_KEY = "bricks_data_sync"

# Change notifier events
EMPLOYEE_ADDED = "employeeAdded"
EMPLOYEE_UPDATED = "employeeUpdated"
EMPLOYEE_DELETED = "employeeDeleted"
EMPLOYEE_WAGE_UPDATED = "employeeWageUpdated"
ATTENDANCE_UPDATED = "attendanceUpdated"
SETTINGS_UPDATED = "settingsUpdated"
PAYROLL_CALCULATED = "payrollCalculated"
DATA_SYNC = "dataSync"
CONNECTION_CHANGE = "connectionChange"

DEFAULT_LATE_GRACE_MINUTES = 5
DEFAULT_STANDARD_HOURS = 8.0
DEFAULT_HOURLY_RATE = 15.0
DEFAULT_OVERTIME_RATE = 1.5
DEFAULT_TAX_RATE = 0.2
DEFAULT_ISSUE_THRESHOLD = 0.75
DEFAULT_PASSWORD_HASH_METHOD = "scrypt"
