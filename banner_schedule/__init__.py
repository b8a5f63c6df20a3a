"""Client for the Banner public class schedule (bwckschd.p_get_crse_unsec)."""

from banner_schedule.course_parser import CourseSessionParser
from banner_schedule.errors import (
    BannerScheduleError,
    InvalidSemester,
    MalformedSubjectCode,
    TransportFailure,
)
from banner_schedule.query_builder import build, encode_for_transport
from banner_schedule.schedule_client import ScheduleClient
from banner_schedule.term_resolver import SEMESTER_CODES, current_semester, encode

__all__ = [
    "BannerScheduleError",
    "CourseSessionParser",
    "InvalidSemester",
    "MalformedSubjectCode",
    "SEMESTER_CODES",
    "ScheduleClient",
    "TransportFailure",
    "build",
    "current_semester",
    "encode",
    "encode_for_transport",
]
