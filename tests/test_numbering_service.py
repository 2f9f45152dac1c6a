"""
tests/test_numbering_service.py
===============================
Fiscal year labels, number formatting and per-agency sequences.
"""
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from voyage.database import Base
from voyage.exceptions import NumberingError
from voyage.models import Agency, Booking, Client, DocumentSequence
from voyage.numbering import (
    DocumentKind, SequenceNumberService, fiscal_year_label, format_document_number, parse_sequence
)

MID_YEAR = date(2025, 8, 15)


# ── pure helpers ─────────────────────────────────────────────────────────────

class TestFiscalYearLabel:

    @pytest.mark.parametrize("on_date,expected", [
        (date(2025, 4, 1), "2025-26"),
        (date(2025, 3, 31), "2024-25"),
        (date(2025, 12, 31), "2025-26"),
        (date(2026, 1, 1), "2025-26"),
        (date(1999, 6, 1), "1999-00"),
    ])
    def test_april_to_march(self, on_date, expected):
        assert fiscal_year_label(on_date, start_month=4) == expected

    def test_calendar_year_when_start_month_is_january(self):
        assert fiscal_year_label(date(2025, 1, 1), start_month=1) == "2025-26"


class TestFormatting:

    @pytest.mark.parametrize("sequence,expected", [
        (1, "2025-26/001"),
        (42, "2025-26/042"),
        (999, "2025-26/999"),
        (1000, "2025-26/1000"),
    ])
    def test_zero_padded_to_three_digits(self, sequence, expected):
        assert format_document_number("2025-26", sequence) == expected

    @pytest.mark.parametrize("number,expected", [
        ("2025-26/007", 7),
        ("2025-26/1000", 1000),
        ("2025-26/abc", None),
        ("", None),
        (None, None),
    ])
    def test_parse_sequence(self, number, expected):
        assert parse_sequence(number) == expected


# ── database-backed issuing ──────────────────────────────────────────────────

class TestIssueNextNumber:

    def test_first_number_of_the_year_is_001(self, db_session, agency):
        svc = SequenceNumberService(db_session)
        assert svc.issue_next_number(agency.id, DocumentKind.BOOKING, today=MID_YEAR) == "2025-26/001"

    def test_numbers_are_consecutive(self, db_session, agency):
        svc = SequenceNumberService(db_session)
        numbers = [svc.issue_next_number(agency.id, DocumentKind.BOOKING, today=MID_YEAR) for _ in range(5)]
        assert numbers == [f"2025-26/{n:03d}" for n in range(1, 6)]

    def test_each_kind_has_its_own_series(self, db_session, agency):
        svc = SequenceNumberService(db_session)
        svc.issue_next_number(agency.id, DocumentKind.BOOKING, today=MID_YEAR)
        svc.issue_next_number(agency.id, DocumentKind.BOOKING, today=MID_YEAR)
        assert svc.issue_next_number(agency.id, DocumentKind.INVOICE, today=MID_YEAR) == "2025-26/001"

    def test_agencies_do_not_share_numbers(self, db_session, make_agency):
        first, second = make_agency(), make_agency()
        svc = SequenceNumberService(db_session)
        svc.issue_next_number(first.id, DocumentKind.BOOKING, today=MID_YEAR)
        svc.issue_next_number(first.id, DocumentKind.BOOKING, today=MID_YEAR)
        assert svc.issue_next_number(second.id, DocumentKind.BOOKING, today=MID_YEAR) == "2025-26/001"

    def test_new_fiscal_year_restarts_at_one(self, db_session, agency):
        svc = SequenceNumberService(db_session)
        svc.issue_next_number(agency.id, DocumentKind.BOOKING, today=date(2026, 3, 31))
        assert svc.issue_next_number(agency.id, DocumentKind.BOOKING, today=date(2026, 4, 1)) == "2026-27/001"

    def test_counter_row_per_agency_kind_and_year(self, db_session, agency):
        svc = SequenceNumberService(db_session)
        for _ in range(3):
            svc.issue_next_number(agency.id, DocumentKind.VEHICLE_VOUCHER, today=MID_YEAR)
        rows = db_session.query(DocumentSequence).filter_by(agency_id=agency.id).all()
        assert len(rows) == 1
        assert rows[0].fiscal_year == "2025-26"
        assert rows[0].last_issued == 3

    def test_rollback_releases_the_number(self, db_session, agency):
        svc = SequenceNumberService(db_session)
        svc.issue_next_number(agency.id, DocumentKind.BOOKING, today=MID_YEAR)
        db_session.commit()
        svc.issue_next_number(agency.id, DocumentKind.BOOKING, today=MID_YEAR)
        db_session.rollback()
        assert svc.issue_next_number(agency.id, DocumentKind.BOOKING, today=MID_YEAR) == "2025-26/002"

    @pytest.mark.parametrize("agency_id", [None, 0, -1])
    def test_invalid_agency_is_rejected(self, db_session, agency_id):
        with pytest.raises(NumberingError):
            SequenceNumberService(db_session).issue_next_number(agency_id, DocumentKind.BOOKING, today=MID_YEAR)


class TestLegacySeeding:

    def test_continues_after_existing_numbers(self, db_session, agency, make_booking):
        make_booking(agency, booking_number="2025-26/004")
        make_booking(agency, booking_number="2025-26/011")
        svc = SequenceNumberService(db_session)
        assert svc.issue_next_number(agency.id, DocumentKind.BOOKING, today=MID_YEAR) == "2025-26/012"

    def test_rolls_over_to_four_digits(self, db_session, agency, make_booking):
        make_booking(agency, booking_number="2025-26/999")
        svc = SequenceNumberService(db_session)
        assert svc.issue_next_number(agency.id, DocumentKind.BOOKING, today=MID_YEAR) == "2025-26/1000"

    def test_previous_year_numbers_are_ignored(self, db_session, agency, make_booking):
        make_booking(agency, booking_number="2024-25/120")
        svc = SequenceNumberService(db_session)
        assert svc.issue_next_number(agency.id, DocumentKind.BOOKING, today=MID_YEAR) == "2025-26/001"

    def test_other_agency_numbers_are_ignored(self, db_session, make_agency, make_booking):
        first, second = make_agency(), make_agency()
        make_booking(first, booking_number="2025-26/050")
        svc = SequenceNumberService(db_session)
        assert svc.issue_next_number(second.id, DocumentKind.BOOKING, today=MID_YEAR) == "2025-26/001"

    def test_find_latest_by_prefix(self, db_session, agency, make_booking):
        make_booking(agency, booking_number="2025-26/003")
        svc = SequenceNumberService(db_session)
        assert svc.find_latest_by_prefix(agency.id, DocumentKind.BOOKING, "2025-26/") == "2025-26/003"
        assert svc.find_latest_by_prefix(agency.id, DocumentKind.BOOKING, "2026-27/") is None

    def test_current_sequence(self, db_session, agency):
        svc = SequenceNumberService(db_session)
        assert svc.current_sequence(agency.id, DocumentKind.BOOKING, today=MID_YEAR) == 0
        svc.issue_next_number(agency.id, DocumentKind.BOOKING, today=MID_YEAR)
        svc.issue_next_number(agency.id, DocumentKind.BOOKING, today=MID_YEAR)
        assert svc.current_sequence(agency.id, DocumentKind.BOOKING, today=MID_YEAR) == 2


# ── concurrent issuing ───────────────────────────────────────────────────────

@pytest.fixture
def file_engine(tmp_path):
    """File-backed SQLite so every thread gets its own connection"""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'numbering.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


class TestConcurrentIssuing:

    WORKERS = 8
    PER_WORKER = 5

    def test_parallel_bookings_get_distinct_consecutive_numbers(self, file_engine):
        factory = sessionmaker(bind=file_engine, autocommit=False, autoflush=False)
        with factory() as setup:
            agency = Agency(
                business_name="Rush Travels",
                address_line1="1 Main Street",
                contact_person_name="Owner",
                contact_person_email="owner@rush.com",
                contact_person_phone="9800000000",
            )
            setup.add(agency)
            setup.flush()
            client = Client(agency_id=agency.id, client_name="Walk-in")
            setup.add(client)
            setup.commit()
            agency_id, client_id = agency.id, client.id

        start = threading.Barrier(self.WORKERS)

        def book_many():
            start.wait()
            issued = []
            for _ in range(self.PER_WORKER):
                with factory() as session:
                    number = SequenceNumberService(session).issue_next_number(
                        agency_id, DocumentKind.BOOKING, today=MID_YEAR
                    )
                    session.add(Booking(agency_id=agency_id, client_id=client_id, booking_number=number))
                    session.commit()
                    issued.append(number)
            return issued

        with ThreadPoolExecutor(max_workers=self.WORKERS) as pool:
            futures = [pool.submit(book_many) for _ in range(self.WORKERS)]
            numbers = [number for future in futures for number in future.result()]

        total = self.WORKERS * self.PER_WORKER
        assert sorted(numbers) == [f"2025-26/{n:03d}" for n in range(1, total + 1)]
        with factory() as check:
            stored = {row.booking_number for row in check.query(Booking).filter_by(agency_id=agency_id)}
            assert stored == set(numbers)
            assert SequenceNumberService(check).current_sequence(
                agency_id, DocumentKind.BOOKING, today=MID_YEAR
            ) == total
