import logging
import re
from typing import Any, Optional

from bs4 import BeautifulSoup, Tag

SessionData = dict[str, Any]
MeetingTime = dict[str, Any]

DAY_MAPPING = {
    "M": 1,
    "T": 2,
    "W": 3,
    "R": 4,
    "F": 5,
    "S": 6,
    "U": 7,
}

# Column order of Banner's "Scheduled Meeting Times" table.
MEETING_COLUMNS = (
    "type",
    "time",
    "days",
    "location",
    "date_range",
    "schedule_type",
    "instructors",
)

TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})\s*([ap]m)$", re.IGNORECASE)


# ======================================================
# Helper Functions
# ======================================================


def parse_time(time_str: Optional[str]) -> str:
    """Convert a Banner time from 12-hour format to 24-hour format.

    Args:
        time_str (Optional[str]): Time string like "1:10 pm", or None

    Returns:
        str: Time in 24-hour format "HH:MM", or "TBA" if it can't be read
    """
    if not time_str:
        return "TBA"

    match = TIME_PATTERN.match(time_str.strip())
    if not match:
        return "TBA"

    hour, minute = int(match.group(1)), int(match.group(2))
    am_pm = match.group(3).lower()

    if am_pm == "pm" and hour != 12:
        hour += 12
    elif am_pm == "am" and hour == 12:
        hour = 0

    return f"{hour:02d}:{minute:02d}"


def safe_extract_text(element: Optional[Tag]) -> Optional[str]:
    """Safely extract stripped text from an element.

    Returns:
        Optional[str]: The text, or None for missing elements and blank text
    """
    if not element or not isinstance(element, Tag):
        return None

    text = re.sub(r"\s+", " ", element.get_text()).strip()

    return text if text else None


def parse_days(days: Optional[str]) -> list[int]:
    """Convert Banner day letters ("MWF") to ISO weekday numbers."""
    if not days:
        return []

    return [DAY_MAPPING[day] for day in days if day in DAY_MAPPING]


def parse_title(title: str) -> Optional[dict[str, Optional[str]]]:
    """Split a section heading "Title - CRN - SUBJ NUM - Section".

    Titles may themselves contain " - ", so the heading is split from the right.
    """
    parts = [part.strip() for part in title.rsplit(" - ", 3)]
    if len(parts) != 4:
        return None

    course_title, crn, course, section = parts
    course_parts = course.split()
    if len(course_parts) != 2:
        return None

    return {
        "title": course_title,
        "crn": crn,
        "subject": course_parts[0],
        "course_number": course_parts[1],
        "section": section,
    }


def extract_labelled_field(detail_cell: Tag, label: str) -> Optional[str]:
    """Read the text following a "<span class="fieldlabeltext">Label: </span>" marker."""
    for span in detail_cell.find_all("span", class_="fieldlabeltext"):
        if span.get_text(strip=True).rstrip(":") != label:
            continue

        sibling = span.next_sibling
        if sibling is None or isinstance(sibling, Tag):
            return None

        text = str(sibling).strip()
        return text or None

    return None


# ====================================================================
# Data Parsing
# ====================================================================


def parse_meeting_row(cols: list[Tag]) -> Optional[MeetingTime]:
    """Parse one row of the "Scheduled Meeting Times" table."""
    if len(cols) != len(MEETING_COLUMNS):
        logging.warning(f"Invalid meeting time row: columns={len(cols)}")
        return None

    raw = {name: safe_extract_text(col) for name, col in zip(MEETING_COLUMNS, cols)}

    begin_time = end_time = "TBA"
    time_str = raw["time"]
    if time_str and " - " in time_str:
        begin, end = time_str.split(" - ", 1)
        begin_time, end_time = parse_time(begin), parse_time(end)

    return {
        "type": raw["type"],
        "days": parse_days(raw["days"]),
        "begin_time": begin_time,
        "end_time": end_time,
        "location": raw["location"],
        "date_range": raw["date_range"],
        "schedule_type": raw["schedule_type"],
        "instructors": raw["instructors"],
    }


def parse_meeting_times(detail_cell: Tag) -> list[MeetingTime]:
    """Parse the nested meeting times table of a section, if there is one."""
    meeting_table = detail_cell.find("table", class_="datadisplaytable")
    if not isinstance(meeting_table, Tag):
        return []

    meeting_times = []
    for row in meeting_table.find_all("tr"):
        cols = row.find_all("td")
        if not cols:
            # header row
            continue

        meeting_time = parse_meeting_row(cols)
        if meeting_time:
            meeting_times.append(meeting_time)

    return meeting_times


def create_session_object(
    heading: dict[str, Optional[str]], detail_cell: Optional[Tag]
) -> SessionData:
    """Combine a parsed heading and its detail cell into one session record."""
    term = levels = None
    meeting_times: list[MeetingTime] = []

    if detail_cell is not None:
        term = extract_labelled_field(detail_cell, "Associated Term")
        levels = extract_labelled_field(detail_cell, "Levels")
        meeting_times = parse_meeting_times(detail_cell)

    return {
        "crn": heading.get("crn"),
        "subject": heading.get("subject"),
        "course_number": heading.get("course_number"),
        "section": heading.get("section"),
        "title": heading.get("title"),
        "term": term,
        "levels": levels,
        "meeting_times": meeting_times,
    }


class CourseSessionParser:
    """Uses bs4 to turn a bwckschd.p_get_crse_unsec response into session records."""

    def __init__(self, features: str = "html.parser"):
        self.features = features

    def parse(self, html: str) -> list[SessionData]:
        """Parse every section listed in the response, in page order.

        Args:
            html (str): Raw response body

        Returns:
            list[SessionData]: One record per section, empty if nothing matched
        """
        soup = BeautifulSoup(html, self.features)
        sessions: list[SessionData] = []

        for i, heading_cell in enumerate(soup.find_all("th", class_="ddtitle")):
            heading = parse_title(heading_cell.get_text(" ", strip=True))
            if not heading:
                logging.warning(f"Section {i}: Unrecognized heading, skipping")
                continue

            detail_cell = None
            heading_row = heading_cell.find_parent("tr")
            detail_row = heading_row.find_next_sibling("tr") if heading_row else None
            if isinstance(detail_row, Tag):
                detail_cell = detail_row.find("td", class_="dddefault")

            if detail_cell is None:
                logging.warning(f"Section {i}: No detail cell for {heading['crn']}")

            sessions.append(create_session_object(heading, detail_cell))

        logging.info(f"Parsed {len(sessions)} sections")
        return sessions
