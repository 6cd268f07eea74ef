"""Unit tests for the CSV exports."""

import pytest

from services.export_service import (
    CHAT_CSV_HEADERS,
    QUOTE_CSV_HEADERS,
    chats_to_csv,
    format_dutch_date,
    quotes_to_csv,
)


class TestFormatDutchDate:
    """Tests for format_dutch_date."""

    @pytest.mark.parametrize("value,expected", [
        ("2024-03-05T10:00:00+00:00", "5-3-2024"),
        ("2024-12-31T23:59:59.123456Z", "31-12-2024"),
        ("2024-01-09", "9-1-2024"),
        (None, ""),
        ("", ""),
    ])
    def test_format(self, value, expected):
        assert format_dutch_date(value) == expected


class TestChatsToCsv:
    """Tests for chats_to_csv."""

    def test_empty(self):
        assert chats_to_csv([]) == ""

    def test_rows(self, sample_chat_rows):
        lines = chats_to_csv(sample_chat_rows).splitlines()

        assert lines[0] == ",".join(CHAT_CSV_HEADERS)
        assert lines[1] == (
            "12,yannova_1709632800000_abc123def,\"Wat kost een plat dak, ongeveer?\","
            "Ik begrijp dat u een offerte wilt aanvragen.,2024-03-05T10:00:00+00:00,"
            "3,0.0,Mozilla/5.0,203.0.113.7"
        )

    def test_quotes_and_missing_session(self, sample_chat_rows):
        lines = chats_to_csv(sample_chat_rows).splitlines()

        assert lines[2] == (
            '11,yannova_1709632800000_abc123def,"Zeg ""hallo""",'
            "Ik help u graag verder!,2024-03-05T09:59:00+00:00,,,,"
        )


class TestQuotesToCsv:
    """Tests for quotes_to_csv."""

    def test_header_only(self):
        assert quotes_to_csv([]) == ",".join(QUOTE_CSV_HEADERS) + "\n"

    def test_row(self, sample_quote_row):
        lines = quotes_to_csv([sample_quote_row]).splitlines()

        assert lines[0] == "ID,Klant,Email,Telefoon,Project Type,Status,Geschatte Waarde,Finale Prijs,Datum"
        assert lines[1] == (
            "QUO-2024-0001,Jan Peeters,jan.peeters@example.be,+32 477 12 34 56,"
            "platedakken,pending,5720,,5-3-2024"
        )

    def test_missing_values(self):
        quote = {
            "quote_id": "QUO-1",
            "klant_naam": "Jan",
            "email": "jan@x.be",
            "project_type": "platedakken",
            "status": "pending",
            "created_at": "2024-03-05T10:00:00Z",
        }

        lines = quotes_to_csv([quote]).splitlines()

        assert lines[1] == "QUO-1,Jan,jan@x.be,,platedakken,pending,0,,5-3-2024"

    def test_final_price_kept(self, sample_quote_row):
        sample_quote_row["final_price"] = 5500

        lines = quotes_to_csv([sample_quote_row]).splitlines()

        assert lines[1].endswith(",5720,5500,5-3-2024")
