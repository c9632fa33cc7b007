from __future__ import annotations

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from booktrack.crud.statistics import (
    get_genre_counts,
    get_rating_summary,
    get_recent_books,
    get_statistics,
    get_status_counts,
)


@pytest.fixture()
def reader(make_user):
    return make_user("reader@example.com")


def test_status_counts_add_up_to_total(db_session, reader, add_books):
    add_books(
        reader.user_id,
        [{"reading_status": "want_to_read"}] * 3
        + [{"reading_status": "currently_reading"}] * 2
        + [{"reading_status": "finished"}] * 4,
    )

    counts = get_status_counts(db_session, reader.user_id)

    assert counts.total_books == 9
    assert (counts.want_to_read, counts.currently_reading, counts.finished) == (3, 2, 4)
    assert counts.total_books == counts.want_to_read + counts.currently_reading + counts.finished


def test_empty_collection(db_session, reader):
    statistics = get_statistics(db_session, reader.user_id)

    assert statistics.total_books == 0
    assert statistics.by_status.finished == 0
    assert statistics.by_genre == {}
    assert statistics.average_rating is None
    assert statistics.rated_books == 0
    assert statistics.recently_added == []


def test_average_rating_is_none_when_nothing_is_rated(db_session, reader, add_books):
    add_books(reader.user_id, [{"rating": None}, {"rating": None}])

    assert get_rating_summary(db_session, reader.user_id) == (None, 0)


@pytest.mark.parametrize(
    ("ratings", "expected"),
    [([4, 5], 4.5), ([4, 4, 5], 4.3), ([4, 5, 4, 4], 4.3), ([1], 1.0), ([2, 3, 3], 2.7)],
)
def test_average_rating_rounds_to_one_decimal(db_session, reader, add_books, ratings, expected):
    add_books(reader.user_id, [{"rating": rating} for rating in ratings] + [{"rating": None}])

    average, rated = get_rating_summary(db_session, reader.user_id)

    assert average == expected
    assert rated == len(ratings)


def test_genre_counts_are_capped_at_ten_and_sorted(db_session, reader, add_books):
    rows = []
    for index in range(12):
        rows.extend([{"genre": f"Genre {index:02d}"}] * (index + 1))
    rows.extend([{"genre": None}] * 30)
    add_books(reader.user_id, rows)

    genres = get_genre_counts(db_session, reader.user_id)

    assert len(genres) == 10
    counts = list(genres.values())
    assert counts == sorted(counts, reverse=True)
    assert next(iter(genres)) == "Genre 11"
    assert genres["Genre 11"] == 12
    assert None not in genres
    assert "Genre 00" not in genres and "Genre 01" not in genres


def test_genre_counts_are_stable_across_calls(db_session, reader, add_books):
    add_books(reader.user_id, [{"genre": f"Genre {index}"} for index in range(15)])

    assert get_genre_counts(db_session, reader.user_id) == get_genre_counts(db_session, reader.user_id)
    assert len(get_genre_counts(db_session, reader.user_id)) == 10


def test_recently_added_returns_five_newest_summaries(db_session, reader, add_books):
    add_books(reader.user_id, [{"title": f"Title {index}"} for index in range(7)])

    recent = get_recent_books(db_session, reader.user_id)

    assert [book.title for book in recent] == ["Title 6", "Title 5", "Title 4", "Title 3", "Title 2"]
    assert set(recent[0].model_dump(by_alias=True)) == {"bookId", "title", "author", "createdAt"}


def test_statistics_are_scoped_to_one_user(db_session, reader, make_user, add_books):
    other = make_user("other@example.com")
    add_books(reader.user_id, [{"genre": "Fantasy", "rating": 5, "reading_status": "finished"}])
    add_books(other.user_id, [{"genre": "Horror", "rating": 1}] * 4)

    statistics = get_statistics(db_session, reader.user_id)

    assert statistics.total_books == 1
    assert statistics.by_genre == {"Fantasy": 1}
    assert statistics.average_rating == 5.0
    assert statistics.rated_books == 1
    assert [book.title for book in statistics.recently_added] == ["Book 0"]


def test_statistics_are_idempotent(db_session, reader, add_books):
    add_books(
        reader.user_id,
        [
            {"genre": "Fantasy", "rating": 4, "reading_status": "finished"},
            {"genre": "Fantasy", "rating": 5, "reading_status": "currently_reading"},
            {"genre": "Essays"},
        ],
    )

    first = get_statistics(db_session, reader.user_id)
    second = get_statistics(db_session, reader.user_id)

    assert first == second
    assert first.total_books == (
        first.by_status.want_to_read + first.by_status.currently_reading + first.by_status.finished
    )
    assert first.average_rating == 4.5
    assert first.rated_books == 2
    assert first.by_genre == {"Fantasy": 2, "Essays": 1}


def test_statistics_serialize_with_wire_names(db_session, reader, add_books):
    add_books(reader.user_id, [{"genre": "Poetry"}])

    payload = get_statistics(db_session, reader.user_id).model_dump(by_alias=True)

    assert set(payload) == {"totalBooks", "byStatus", "byGenre", "averageRating", "ratedBooks", "recentlyAdded"}
    assert payload["byStatus"] == {"wantToRead": 1, "currentlyReading": 0, "finished": 0}
    assert payload["averageRating"] is None


def test_storage_failure_propagates(db_session, reader):
    db_session.execute(text("DROP TABLE books"))
    db_session.commit()

    with pytest.raises(OperationalError):
        get_statistics(db_session, reader.user_id)
