"""Tests for the SQLAlchemy models, the Alembic migration and the API schemas."""

from __future__ import annotations

import importlib.util
import os
from datetime import datetime, timezone

import pytest
import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from greda_gbc.models import (
    ActivityLog,
    Assessment,
    AssessmentMedia,
    AssessmentSection,
    Base,
    Notification,
    User,
    UserInvitation,
)
from greda_gbc.models.base import utcnow
from greda_gbc.schemas.assessment import AssessmentCreate, Location, MediaAttach, SectionUpsert
from greda_gbc.schemas.user import InvitationCreate, UserCreate

PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
MIGRATION_PATH = os.path.join(PROJECT_ROOT, "alembic", "versions", "001_initial_schema.py")

TABLES = {
    "users",
    "user_invitations",
    "assessments",
    "assessment_sections",
    "assessment_media",
    "activity_logs",
    "notifications",
}


def _load_migration():
    spec = importlib.util.spec_from_file_location("initial_schema", MIGRATION_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def engine():
    engine = sa.create_engine("sqlite://")
    yield engine
    engine.dispose()


# ─── Base helpers ───────────────────────────────────────────────────────────

class TestBaseModel:
    """Shared declarative helpers."""

    def test_utcnow_returns_utc(self):
        assert utcnow().tzinfo == timezone.utc

    def test_utcnow_is_current(self):
        before = datetime.now(timezone.utc)
        now = utcnow()
        after = datetime.now(timezone.utc)
        assert before <= now <= after

    def test_metadata_has_all_tables(self):
        assert set(Base.metadata.tables) == TABLES


# ─── ORM round-trip on SQLite ───────────────────────────────────────────────

class TestModels:
    """Model definitions map onto a working schema."""

    def _seed(self, session: Session) -> Assessment:
        session.add_all([
            User(id="u-assessor", email="a@greda.test", role="assessor", status="active"),
            User(id="u-client", email="c@greda.test", role="client", status="active"),
        ])
        assessment = Assessment(public_id="p-1", user_id="u-assessor", client_id="u-client", building_name="Block A")
        session.add(assessment)
        session.flush()
        return assessment

    def test_defaults(self, engine):
        Base.metadata.create_all(engine)
        with Session(engine) as session:
            assessment = self._seed(session)
            assert assessment.status == "draft"
            assert assessment.is_locked is False
            assert assessment.version == 1
            assert assessment.total_sections == 8
            assert assessment.created_at is not None

    def test_section_unique_per_assessment(self, engine):
        Base.metadata.create_all(engine)
        with Session(engine) as session:
            assessment = self._seed(session)
            session.add(AssessmentSection(assessment_id=assessment.id, section_type="innovation", section_name="Innovation"))
            session.flush()
            session.add(AssessmentSection(assessment_id=assessment.id, section_type="innovation", section_name="Innovation"))
            with pytest.raises(IntegrityError):
                session.flush()

    def test_json_columns_round_trip(self, engine):
        Base.metadata.create_all(engine)
        with Session(engine) as session:
            assessment = self._seed(session)
            assessment.pending_edit_request = {"requested_by": "u-assessor", "reason": "typo"}
            session.add(AssessmentSection(
                assessment_id=assessment.id,
                section_type="energy-efficiency",
                section_name="Energy Efficiency",
                variables={"solarPanels": 5.0},
                location_data={"solarPanels": {"lat": 5.6, "lng": -0.2, "address": None}},
            ))
            session.add(ActivityLog(
                user_id="u-assessor",
                activity_type="assessment_created",
                title="Assessment Created",
                description="Created",
                assessment_id=assessment.id,
                metadata_={"creator_role": "assessor"},
            ))
            session.add(Notification(
                user_id="u-client",
                type="assessment_started",
                title="Assessment Started",
                message="Started",
                metadata_={"assessor_id": "u-assessor"},
            ))
            session.add(AssessmentMedia(
                assessment_id=assessment.id,
                section_type="energy-efficiency",
                field_name="solarPanels",
                file_name="roof.jpg",
                file_type="image",
                file_path="/uploads/roof.jpg",
            ))
            session.add(UserInvitation(
                email="new@greda.test",
                invited_by="u-assessor",
                token="t" * 43,
                expires_at=utcnow(),
            ))
            session.commit()

            section = session.scalars(sa.select(AssessmentSection)).one()
            assert section.variables == {"solarPanels": 5.0}
            log = session.scalars(sa.select(ActivityLog)).one()
            assert log.metadata_ == {"creator_role": "assessor"}
            assert session.scalars(sa.select(Notification)).one().is_read is False
            assert session.get(Assessment, assessment.id).pending_edit_request["reason"] == "typo"

    def test_metadata_column_name(self):
        assert "metadata" in ActivityLog.__table__.c
        assert "metadata" in Notification.__table__.c

    def test_reprs(self):
        assert "innovation" in repr(AssessmentSection(section_type="innovation", score=3.0))
        assert "assessor" in repr(User(email="a@greda.test", role="assessor"))


# ─── Alembic migration ──────────────────────────────────────────────────────

class TestInitialMigration:
    """The hand-written migration matches the models."""

    def test_revision_metadata(self):
        migration = _load_migration()
        assert migration.revision == "001"
        assert migration.down_revision is None

    def test_upgrade_creates_tables_matching_models(self, engine):
        migration = _load_migration()
        with engine.begin() as connection:
            context = MigrationContext.configure(connection)
            with Operations.context(context):
                migration.upgrade()
            inspector = sa.inspect(connection)
            assert set(inspector.get_table_names()) == TABLES
            for name, table in Base.metadata.tables.items():
                migrated = {c["name"] for c in inspector.get_columns(name)}
                assert migrated == {c.name for c in table.columns}, name

    def test_upgrade_has_section_unique_constraint(self, engine):
        migration = _load_migration()
        with engine.begin() as connection:
            with Operations.context(MigrationContext.configure(connection)):
                migration.upgrade()
            constraints = sa.inspect(connection).get_unique_constraints("assessment_sections")
            assert any(set(c["column_names"]) == {"assessment_id", "section_type"} for c in constraints)

    def test_downgrade_drops_everything(self, engine):
        migration = _load_migration()
        with engine.begin() as connection:
            with Operations.context(MigrationContext.configure(connection)):
                migration.upgrade()
                migration.downgrade()
            assert sa.inspect(connection).get_table_names() == []

    def test_alembic_files_present(self):
        assert os.path.isfile(os.path.join(PROJECT_ROOT, "alembic.ini"))
        assert os.path.isfile(os.path.join(PROJECT_ROOT, "alembic", "env.py"))


# ─── Request schemas ────────────────────────────────────────────────────────

class TestSchemas:
    """Pydantic request validation."""

    def test_assessment_create_defaults(self):
        payload = AssessmentCreate(client_id="c1")
        assert payload.building.model_dump(exclude_none=True) == {}

    def test_negative_footprint_rejected(self):
        with pytest.raises(ValidationError):
            AssessmentCreate(client_id="c1", building={"building_footprint": -1})

    def test_location_bounds(self):
        Location(lat=90, lng=-180)
        with pytest.raises(ValidationError):
            Location(lat=90.1, lng=0)

    def test_section_upsert_defaults(self):
        payload = SectionUpsert()
        assert payload.variables == {}
        assert payload.is_completed is False
        assert payload.expected_version is None

    def test_section_upsert_rejects_text_scores(self):
        with pytest.raises(ValidationError):
            SectionUpsert(variables={"solarPanels": "lots"})

    def test_media_requires_field_name(self):
        with pytest.raises(ValidationError):
            MediaAttach(section_type="innovation", field_name="", file_name="a", file_type="image", file_path="/a")

    def test_email_pattern(self):
        UserCreate(email="ok@greda.test", role="client")
        with pytest.raises(ValidationError):
            InvitationCreate(email="missing-at.greda.test")
