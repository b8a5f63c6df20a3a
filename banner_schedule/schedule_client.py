import logging
from datetime import date
from typing import Any, Mapping, Optional

import requests
from requests.exceptions import ConnectionError, HTTPError, RequestException, Timeout

from banner_schedule import query_builder, term_resolver
from banner_schedule.course_parser import CourseSessionParser
from banner_schedule.errors import MalformedSubjectCode, TransportFailure


class ScheduleClient:
    """Looks up class sessions on a Banner public schedule for one academic term."""

    # BU Brain public schedule
    DEFAULT_URI = "https://ssb.cc.binghamton.edu/banner"

    # Banner procedure backing each supported operation.
    URI_SUFFIXES = {
        "get_course_sessions": "bwckschd.p_get_crse_unsec",
    }

    HEADERS = {"Content-Type": "application/x-www-form-urlencoded; charset=UTF-8"}

    DEFAULT_TIMEOUT = 20

    def __init__(
        self,
        year: Optional[int] = None,
        semester: Optional[str] = None,
        base_uri: Optional[str] = None,
        parser: Optional[Any] = None,
        session: Optional[Any] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ):
        """Constructs a client bound to a single academic term.

        Args:
            year (Optional[int]): Calendar year, defaults to the current year
            semester (Optional[str]): "spring", "summer", "fall" or "winter",
                                      defaults to a guess based on the current month
            base_uri (Optional[str]): Banner root, defaults to DEFAULT_URI
            parser (Optional[Any]): Object with a parse(html) method turning the
                                    response body into session records
            session (Optional[Any]): Object with a requests-style post() method,
                                     defaults to the requests module
            timeout (Optional[float]): Seconds to wait for Banner, None waits forever

        Raises:
            InvalidSemester: If the semester is not recognized
        """
        if year is None:
            year = date.today().year
        if semester is None:
            semester = term_resolver.current_semester()

        self._term_id = term_resolver.encode(year, semester)
        self._base_uri = (base_uri or self.DEFAULT_URI).rstrip("/")

        self.parser = parser if parser is not None else CourseSessionParser()
        self.session = session if session is not None else requests
        self.timeout = timeout

        logging.info(
            f"ScheduleClient initialized for term {self._term_id} at {self._base_uri}"
        )

    @property
    def term_id(self) -> str:
        return self._term_id

    @property
    def base_uri(self) -> str:
        return self._base_uri

    def get_course_sessions(
        self, subject_code: str, course_number: Optional[str] = None
    ) -> list:
        """Returns all sessions that match the subject code and course number.

        Args:
            subject_code (str): A full code ("EECE 251"), or a subject-only code
                                ("EECE") when course_number is given
            course_number (Optional[str]): The course number ("251"), if not part
                                           of subject_code

        Returns:
            list: Session records exactly as produced by the parser

        Raises:
            MalformedSubjectCode: If subject_code can't be split into subject and number
            TransportFailure: If the request to Banner fails
        """
        if course_number is None:
            tokens = subject_code.split()
            if len(tokens) != 2:
                raise MalformedSubjectCode(subject_code)
            subject_code, course_number = tokens

        fields = query_builder.build(self._term_id, subject_code, course_number)
        html = self.perform_banner_request("get_course_sessions", fields)

        return self.parser.parse(html)

    def operation_uri(self, operation: str) -> str:
        """Resolve an operation name to its full Banner URI.

        Raises:
            ValueError: If the operation has no known Banner procedure
        """
        try:
            suffix = self.URI_SUFFIXES[operation]
        except KeyError:
            raise ValueError(f"Unknown Banner operation: {operation!r}") from None

        return f"{self._base_uri}/{suffix}"

    def perform_banner_request(
        self,
        operation: str,
        fields: Mapping[str, Any],
        referrer: Optional[str] = None,
    ) -> str:
        """Sends a single POST for the given operation and returns the raw body.

        Args:
            operation (str): Key into URI_SUFFIXES
            fields (Mapping[str, Any]): Query fields, see query_builder.build
            referrer (Optional[str]): Value for the Referer header, if any

        Returns:
            str: The response body, unmodified

        Raises:
            TransportFailure: On timeout, connection error, HTTP error or any
                              other request error
        """
        target_uri = self.operation_uri(operation)
        body = query_builder.encode_for_transport(fields)

        headers = dict(self.HEADERS)
        if referrer:
            headers["Referer"] = referrer

        response = None
        try:
            logging.info(f"Requesting {operation} for term {self._term_id}...")

            response = self.session.post(
                target_uri, data=body, headers=headers, timeout=self.timeout
            )

            # check for HTTP errors (4xx or 5xx)
            response.raise_for_status()

            # redirects requests did not follow, 1xx finals, etc.
            if not 200 <= response.status_code < 300:
                logging.error(
                    f"Unexpected status performing {operation} - Status Code: {response.status_code}"
                )
                raise TransportFailure(
                    f"HTTP error from {target_uri}: unexpected status {response.status_code}"
                )

            logging.info(f"{operation} request successful.")

            return response.text

        except Timeout as timeout_err:
            logging.error(f"The request timed out while performing {operation}.")
            raise TransportFailure(
                f"The request to {target_uri} timed out", timeout_err
            ) from timeout_err

        except HTTPError as http_err:
            status_code = response.status_code if response is not None else "N/A"
            logging.error(
                f"HTTP error occurred performing {operation}: {http_err} - Status Code: {status_code}"
            )
            raise TransportFailure(
                f"HTTP error from {target_uri}: {http_err}", http_err
            ) from http_err

        except ConnectionError as conn_err:
            logging.error(
                f"A connection error occurred performing {operation}: {conn_err}"
            )
            raise TransportFailure(
                f"A connection error occurred contacting {target_uri}: {conn_err}",
                conn_err,
            ) from conn_err

        except RequestException as req_error:
            logging.error(f"An error occurred performing {operation}: {req_error}")
            raise TransportFailure(
                f"An error occurred contacting {target_uri}: {req_error}", req_error
            ) from req_error
