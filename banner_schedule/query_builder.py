from types import MappingProxyType
from typing import Any, Mapping, Optional
from urllib.parse import urlencode

QueryFields = dict[str, Any]

# Banner's way of saying "don't filter on this field".
EMPTY_FIELD = ("dummy", "%")

# Every field the course selection form posts. Banner rejects the request
# if any of them is missing, even though we only ever fill in three.
COURSE_SELECTION_TEMPLATE: Mapping[str, Any] = MappingProxyType(
    {
        "term_in": "0",
        "sel_subj": EMPTY_FIELD,
        "sel_day": "dummy",
        "sel_schd": EMPTY_FIELD,
        "sel_insm": EMPTY_FIELD,
        "sel_camp": EMPTY_FIELD,
        "sel_levl": EMPTY_FIELD,
        "sel_sess": EMPTY_FIELD,
        "sel_instr": EMPTY_FIELD,
        "sel_ptrm": EMPTY_FIELD,
        "sel_attr": EMPTY_FIELD,
        "sel_crse": "",
        "sel_title": "",
        "sel_from_cred": "",
        "sel_to_cred": "",
        "begin_hh": "0",
        "begin_mi": "0",
        "begin_ap": "a",
        "end_hh": "0",
        "end_mi": "0",
        "end_ap": "a",
    }
)

# Percent-encoded "[]" suffix; Banner's form parser chokes on it.
ENCODED_ARRAY_MARKER = "%5B%5D"


def build(
    term_id: str, subject_code: str, course_number: Optional[str] = None
) -> QueryFields:
    """Fill in a fresh copy of the course selection template.

    Args:
        term_id (str): Banner term identifier (e.g., "201390")
        subject_code (str): Department code (e.g., "EECE")
        course_number (Optional[str]): Course number (e.g., "251"), empty matches all

    Returns:
        QueryFields: Field name to value mapping, safe to modify by the caller
    """
    fields = dict(COURSE_SELECTION_TEMPLATE)

    fields["term_in"] = term_id
    fields["sel_subj"] = ("dummy", subject_code)
    fields["sel_crse"] = course_number or ""

    return fields


def encode_for_transport(fields: Mapping[str, Any]) -> str:
    """Serialize query fields into a form-encoded request body.

    Multi-valued fields are written as repeated "name[]" keys, then every
    encoded "[]" is removed from the finished string so Banner sees plain
    repeated keys.

    Args:
        fields (Mapping[str, Any]): Field name to value (str or sequence of str)

    Returns:
        str: The body, e.g. "term_in=201390&sel_subj=dummy&sel_subj=EECE&..."
    """
    pairs = []
    for name, value in fields.items():
        if isinstance(value, (list, tuple)):
            pairs.extend((f"{name}[]", item) for item in value)
        else:
            pairs.append((name, value))

    return urlencode(pairs).replace(ENCODED_ARRAY_MARKER, "")
