"""
Tests for the Book models.

These tests verify that:
1. Book enforces 0 <= available_copies <= copies
2. BookCreate trims strings and reports every violated rule
3. BookUpdate applies only supplied fields and refuses availability
"""

from datetime import date

import pytest
from pydantic import ValidationError

from library_lending.models.book import Book, BookCreate, BookUpdate
from library_lending.models.validation import validation_messages


class TestBookModel:
    """Test suite for the Book read model."""

    def test_create_valid_book(self):
        book = Book(
            id=1,
            title="The Great Gatsby",
            author="F. Scott Fitzgerald",
            isbn="978-0-7432-7356-5",
            category="Fiction",
            publish_year=1925,
            copies=5,
            available_copies=4,
        )

        # ISBNs are compared byte-for-byte, so they are kept as given
        assert book.isbn == "978-0-7432-7356-5"
        assert book.is_available is True
        assert book.on_loan == 1

    def test_available_copies_cannot_exceed_copies(self):
        with pytest.raises(ValidationError) as exc_info:
            Book(
                id=1,
                title="T",
                author="A",
                isbn="1",
                category="C",
                publish_year=2000,
                copies=2,
                available_copies=3,
            )
        assert "cannot exceed total copies" in str(exc_info.value)

    def test_available_copies_cannot_be_negative(self):
        with pytest.raises(ValidationError):
            Book(
                id=1,
                title="T",
                author="A",
                isbn="1",
                category="C",
                publish_year=2000,
                copies=2,
                available_copies=-1,
            )

    def test_no_copies_available(self):
        book = Book(
            id=2,
            title="T",
            author="A",
            isbn="1",
            category="C",
            publish_year=2000,
            copies=1,
            available_copies=0,
        )
        assert book.is_available is False
        assert book.on_loan == 1


class TestBookCreate:
    """Test suite for the add-book payload."""

    def test_strings_are_trimmed(self, book_data):
        payload = BookCreate(**{**book_data, "title": "  Dune  ", "isbn": " 978-0-441-17271-9 "})
        assert payload.title == "Dune"
        assert payload.isbn == "978-0-441-17271-9"

    def test_every_violation_is_reported(self):
        with pytest.raises(ValidationError) as exc_info:
            BookCreate(
                title="   ",
                author="",
                isbn="978-0-441-17271-9",
                category="Fiction",
                publish_year=date.today().year + 1,
                copies=0,
            )

        messages = validation_messages(exc_info.value)
        assert messages == [
            "Title is required",
            "Author is required",
            "Invalid publish year",
            "Copies must be at least 1",
        ]

    def test_missing_fields_are_reported_by_label(self):
        with pytest.raises(ValidationError) as exc_info:
            BookCreate(title="Dune")

        messages = validation_messages(exc_info.value)
        assert "ISBN is required" in messages
        assert "Publish year is required" in messages
        assert len(messages) == 5

    @pytest.mark.parametrize("year", [999, 1000, date.today().year])
    def test_publish_year_bounds(self, book_data, year):
        if year < 1000:
            with pytest.raises(ValidationError):
                BookCreate(**{**book_data, "publish_year": year})
        else:
            assert BookCreate(**{**book_data, "publish_year": year}).publish_year == year

    def test_publish_year_limit_comes_from_context(self, book_data):
        payload = {**book_data, "publish_year": 2025}

        with pytest.raises(ValidationError) as exc_info:
            BookCreate.model_validate(payload, context={"today": date(2024, 11, 1)})
        assert validation_messages(exc_info.value) == ["Invalid publish year"]

        created = BookCreate.model_validate(payload, context={"today": date(2025, 1, 1)})
        assert created.publish_year == 2025

    def test_update_publish_year_limit_comes_from_context(self):
        with pytest.raises(ValidationError):
            BookUpdate.model_validate({"publish_year": 2025}, context={"today": date(2024, 6, 1)})

    def test_available_copies_cannot_be_supplied(self, book_data):
        with pytest.raises(ValidationError) as exc_info:
            BookCreate(**book_data, available_copies=1)
        assert validation_messages(exc_info.value) == ["Available copies cannot be set"]


class TestBookUpdate:
    """Test suite for partial book updates."""

    def test_only_supplied_fields_are_changes(self):
        update = BookUpdate(title=" New Title ", copies=3)
        assert update.changes() == {"title": "New Title", "copies": 3}

    def test_empty_update(self):
        assert BookUpdate().changes() == {}

    def test_blank_string_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            BookUpdate(author="  ")
        assert validation_messages(exc_info.value) == ["Author cannot be empty"]

    def test_availability_is_not_writable(self):
        with pytest.raises(ValidationError):
            BookUpdate(available_copies=10)

    def test_copies_rule_still_applies(self):
        with pytest.raises(ValidationError) as exc_info:
            BookUpdate(copies=0)
        assert validation_messages(exc_info.value) == ["Copies must be at least 1"]
