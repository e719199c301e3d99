from timetable.models.activity_log import ActivityLog  # noqa: F401
from timetable.models.schedule_entry import ScheduleEntryRecord  # noqa: F401
from timetable.models.subject import Subject  # noqa: F401
