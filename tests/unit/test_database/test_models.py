"""
Unit tests for database models
"""

import pytest
from datetime import datetime
from sqlalchemy import create_engine, insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from database.models import Base, QuoteDB, TagDB, Quote, quote_tags, generate_quote_id


@pytest.mark.unit
class TestDatabaseModels:
    """Test cases for database models"""

    @pytest.fixture
    def in_memory_db(self):
        """Create in-memory SQLite database for testing"""
        engine = create_engine("sqlite:///:memory:")
        Base.metadata.create_all(engine)
        SessionLocal = sessionmaker(bind=engine)
        session = SessionLocal()
        yield session
        session.close()

    def test_quote_model_creation(self, in_memory_db):
        """Test QuoteDB defaults"""
        quote = QuoteDB(title="Title", content="Body")
        in_memory_db.add(quote)
        in_memory_db.commit()

        retrieved = in_memory_db.query(QuoteDB).first()
        assert len(retrieved.id) == 32
        assert isinstance(retrieved.created_at, datetime)
        assert retrieved.author is None
        assert retrieved.language is None
        assert retrieved.tags == []

    def test_tags_ordered_by_position(self, in_memory_db):
        """Test the tags relationship follows quote_tags.position"""
        quote = QuoteDB(title="t", content="c")
        first, second = TagDB(name="first"), TagDB(name="second")
        in_memory_db.add_all([quote, first, second])
        in_memory_db.flush()

        in_memory_db.execute(insert(quote_tags), [
            {"quote_id": quote.id, "tag_id": second.id, "position": 1},
            {"quote_id": quote.id, "tag_id": first.id, "position": 0},
        ])
        in_memory_db.commit()
        in_memory_db.expire_all()

        retrieved = in_memory_db.get(QuoteDB, quote.id)
        assert [tag.name for tag in retrieved.tags] == ["first", "second"]
        assert [q.id for q in first.quotes] == [quote.id]

    def test_tag_name_unique(self, in_memory_db):
        in_memory_db.add_all([TagDB(name="dup"), TagDB(name="dup")])
        with pytest.raises(IntegrityError):
            in_memory_db.commit()

    def test_to_model(self, in_memory_db):
        """Test conversion to the API model"""
        quote = QuoteDB(
            id="abc",
            created_at=datetime(2024, 5, 6, 7, 8, 9, 123456),
            title="t",
            content="c",
            author="a",
            language="es"
        )
        x, y = TagDB(name="x"), TagDB(name="y")
        in_memory_db.add_all([quote, x, y])
        in_memory_db.flush()
        in_memory_db.execute(insert(quote_tags), [
            {"quote_id": "abc", "tag_id": x.id, "position": 0},
            {"quote_id": "abc", "tag_id": y.id, "position": 1},
        ])
        in_memory_db.commit()

        model = in_memory_db.get(QuoteDB, "abc").to_model()
        assert model.created_at == "2024-05-06T07:08:09.123Z"
        assert model.hashtags == ["x", "y"]

        data = model.model_dump(by_alias=True)
        assert data == {
            "id": "abc",
            "createdAt": "2024-05-06T07:08:09.123Z",
            "title": "t",
            "content": "c",
            "author": "a",
            "language": "es",
            "hashtags": ["x", "y"],
        }

    def test_quote_model_accepts_field_names(self):
        quote = Quote(id="1", created_at="2024-01-01T00:00:00.000Z", title="t", content="c")
        assert quote.hashtags == []

    def test_generate_quote_id_unique(self):
        ids = {generate_quote_id() for _ in range(100)}
        assert len(ids) == 100
