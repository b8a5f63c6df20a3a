import unittest
from datetime import date
from unittest.mock import MagicMock, patch

from requests.exceptions import ConnectionError, HTTPError, RequestException, Timeout

from banner_schedule.course_parser import CourseSessionParser
from banner_schedule.errors import InvalidSemester, MalformedSubjectCode, TransportFailure
from banner_schedule.query_builder import build, encode_for_transport
from banner_schedule.schedule_client import ScheduleClient


FIXTURE_HTML = "<html><body>CS 101 fixture</body></html>"


class ScheduleClientTest(unittest.TestCase):
    def setUp(self):
        """Sets up the text fixture. Runs once at the beginning of each test."""
        self.mock_session = MagicMock()
        self.mock_response = MagicMock()
        self.mock_response.status_code = 200
        self.mock_response.text = FIXTURE_HTML
        self.mock_session.post.return_value = self.mock_response

        self.mock_parser = MagicMock()
        self.records = [
            {"crn": "90001", "section": "01"},
            {"crn": "90002", "section": "A0"},
            {"crn": "90003", "section": "02"},
        ]
        self.mock_parser.parse.return_value = self.records

        self.client = ScheduleClient(
            2013,
            "fall",
            base_uri="http://banner.test/banner",
            parser=self.mock_parser,
            session=self.mock_session,
        )

    def test_term_id_resolved_at_construction(self):
        self.assertEqual(self.client.term_id, "201390")

    def test_invalid_semester_fails_construction(self):
        with self.assertRaises(InvalidSemester):
            ScheduleClient(2013, "autumn", session=self.mock_session)

    @patch("banner_schedule.term_resolver.date")
    @patch("banner_schedule.schedule_client.date")
    def test_defaults(self, mock_client_date, mock_resolver_date):
        mock_client_date.today.return_value = date(2013, 3, 15)
        mock_resolver_date.today.return_value = date(2013, 3, 15)

        client = ScheduleClient(session=self.mock_session)

        self.assertEqual(client.base_uri, ScheduleClient.DEFAULT_URI)
        self.assertEqual(client.term_id, "201320")
        self.assertIsInstance(client.parser, CourseSessionParser)

    def test_base_uri_trailing_slash(self):
        client = ScheduleClient(2013, "fall", base_uri="http://banner.test/banner/")
        self.assertEqual(
            client.operation_uri("get_course_sessions"),
            "http://banner.test/banner/bwckschd.p_get_crse_unsec",
        )

    def test_get_course_sessions_success(self):
        """Tests that records come back exactly as the parser produced them."""
        # ===== Act ======
        sessions = self.client.get_course_sessions("CS", "101")

        # ===== Assert =====
        self.assertIs(sessions, self.records)
        self.assertEqual([s["crn"] for s in sessions], ["90001", "90002", "90003"])
        self.mock_parser.parse.assert_called_once_with(FIXTURE_HTML)
        self.mock_session.post.assert_called_once_with(
            "http://banner.test/banner/bwckschd.p_get_crse_unsec",
            data=encode_for_transport(build("201390", "CS", "101")),
            headers=ScheduleClient.HEADERS,
            timeout=ScheduleClient.DEFAULT_TIMEOUT,
        )

    def test_combined_and_split_codes_send_same_body(self):
        self.client.get_course_sessions("EECE 251")
        self.client.get_course_sessions("EECE", "251")

        first, second = self.mock_session.post.call_args_list
        self.assertEqual(first.kwargs["data"], second.kwargs["data"])
        self.assertIn("sel_subj=EECE", first.kwargs["data"])
        self.assertIn("sel_crse=251", first.kwargs["data"])

    def test_subject_without_number_is_rejected(self):
        for code in ("EECE", "", "EECE 251 01"):
            with self.assertRaises(MalformedSubjectCode):
                self.client.get_course_sessions(code)

        self.mock_session.post.assert_not_called()
        self.mock_parser.parse.assert_not_called()

    def test_empty_result_is_returned(self):
        self.mock_parser.parse.return_value = []
        self.assertEqual(self.client.get_course_sessions("CS 999"), [])

    def test_referrer_header(self):
        self.client.perform_banner_request(
            "get_course_sessions", build("201390", "CS", "101"), referrer="http://banner.test/"
        )

        headers = self.mock_session.post.call_args.kwargs["headers"]
        self.assertEqual(headers["Referer"], "http://banner.test/")
        self.assertNotIn("Referer", ScheduleClient.HEADERS)

    def test_unknown_operation(self):
        with self.assertRaises(ValueError):
            self.client.perform_banner_request("get_catalog", {})

        self.mock_session.post.assert_not_called()

    def test_parser_errors_propagate(self):
        self.mock_parser.parse.side_effect = AttributeError("bad markup")

        with self.assertRaises(AttributeError):
            self.client.get_course_sessions("CS", "101")

    def test_timeout(self):
        """Tests that a timeout raises TransportFailure."""
        err = Timeout()
        self.mock_session.post.side_effect = err

        with self.assertRaises(TransportFailure) as context:
            self.client.get_course_sessions("CS", "101")

        self.assertIn("timed out", str(context.exception).lower())
        self.assertIs(context.exception.cause, err)
        self.assertIs(context.exception.__cause__, err)
        self.mock_parser.parse.assert_not_called()

    def test_http_error(self):
        """Tests that a non-2xx response raises TransportFailure."""
        self.mock_response.status_code = 500
        self.mock_response.raise_for_status.side_effect = HTTPError("500 Server Error")

        with self.assertRaises(TransportFailure) as context:
            self.client.get_course_sessions("CS", "101")

        self.assertIn("http error", str(context.exception).lower())
        self.assertIsInstance(context.exception.cause, HTTPError)
        self.mock_parser.parse.assert_not_called()

    def test_non_success_status_without_http_error(self):
        """Tests that a 3xx left unfollowed by requests raises TransportFailure."""
        self.mock_response.status_code = 300
        self.mock_response.text = "<html>Multiple Choices</html>"

        with self.assertRaises(TransportFailure) as context:
            self.client.get_course_sessions("CS", "101")

        self.assertIn("unexpected status 300", str(context.exception).lower())
        self.mock_parser.parse.assert_not_called()

    def test_connection_error(self):
        """Tests that a connection error raises TransportFailure."""
        self.mock_session.post.side_effect = ConnectionError()

        with self.assertRaises(TransportFailure) as context:
            self.client.get_course_sessions("CS", "101")

        self.assertIn("connection error", str(context.exception).lower())

    def test_generic_request_exception(self):
        """Tests that any other request error raises TransportFailure."""
        self.mock_session.post.side_effect = RequestException("Unexpected error")

        with self.assertRaises(TransportFailure) as context:
            self.client.get_course_sessions("CS", "101")

        self.assertIn("error occurred", str(context.exception).lower())

    def test_transport_failure_is_runtime_error(self):
        self.mock_session.post.side_effect = Timeout()

        with self.assertRaises(RuntimeError):
            self.client.get_course_sessions("CS", "101")

    @patch("banner_schedule.schedule_client.requests.post")
    def test_default_transport_is_requests(self, mock_post):
        mock_response = MagicMock()
        mock_response.status_code = 200
        mock_response.text = FIXTURE_HTML
        mock_post.return_value = mock_response

        client = ScheduleClient(2013, "spring", parser=self.mock_parser)
        client.get_course_sessions("MATH 221")

        mock_post.assert_called_once()
        args, kwargs = mock_post.call_args
        self.assertEqual(
            args[0], "https://ssb.cc.binghamton.edu/banner/bwckschd.p_get_crse_unsec"
        )
        self.assertTrue(kwargs["data"].startswith("term_in=201320&"))


if __name__ == "__main__":
    unittest.main()
