"""Tests for schema_gate.schema.validator -- the publish decision pipeline."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from graphql import GraphQLSchema

from schema_gate.errors import SchemaParseError
from schema_gate.schema.changes import Criticality, SchemaChange, SchemaError
from schema_gate.schema.helper import SchemaHelper
from schema_gate.schema.objects import ExternalComposition, Project, TargetSelector
from schema_gate.schema.validator import SchemaValidator, ValidationResult

helper = SchemaHelper()

USERS_V1 = """
type Query {
  user(id: ID!): User
}

type User {
  id: ID!
  name: String
}
"""

USERS_V2 = """
type Query {
  user(id: ID!): User
}

type User {
  id: ID!
  fullName: String
}
"""

POSTS = """
type Post {
  id: ID!
  title: String
}
"""

SELECTOR = TargetSelector(organization="acme", project="shop", target="production")


# --- Test Helpers ---


def _schema(raw: str, source: str = "users"):
    return helper.create_schema_object(raw, source=source)


def _breaking(message: str = "User.name was removed.", path=("User", "name")) -> SchemaChange:
    return SchemaChange(criticality=Criticality.BREAKING, message=message, path=list(path))


def _dangerous(message: str = "Role.GUEST was added to enum type Role.") -> SchemaChange:
    return SchemaChange(criticality=Criticality.DANGEROUS, message=message, path=["Role", "GUEST"])


async def _first_schema(schemas, config):
    """Stand-in for Orchestrator.build: the first subschema is the composed schema."""
    return schemas[0] if schemas else None


@pytest.fixture
def orchestrator():
    mock = MagicMock()
    mock.validate = AsyncMock(return_value=[])
    mock.build = AsyncMock(side_effect=_first_schema)
    return mock


@pytest.fixture
def inspector():
    mock = MagicMock()
    mock.diff = AsyncMock(return_value=[])
    return mock


@pytest.fixture
def validator(inspector):
    return SchemaValidator(inspector=inspector, helper=helper)


async def _validate(validator, orchestrator, **overrides) -> ValidationResult:
    incoming = _schema(USERS_V2)
    existing = _schema(USERS_V1)
    kwargs = dict(
        orchestrator=orchestrator,
        selector=SELECTOR,
        incoming=incoming,
        existing=existing,
        is_initial=False,
        before=[existing],
        after=[incoming],
        base_schema=None,
        accept_breaking_changes=False,
        project=Project(),
    )
    kwargs.update(overrides)
    return await validator.validate(**kwargs)


def _assert_consistent(result: ValidationResult):
    assert result.valid == (len(result.errors) == 0)
    assert result.is_composable == result.valid


# --- Initial schema ---


class TestInitialSchema:
    @pytest.mark.asyncio
    async def test_initial_schema_without_errors_is_valid(self, validator, orchestrator, inspector):
        incoming = _schema(USERS_V1)
        result = await _validate(
            validator,
            orchestrator,
            incoming=incoming,
            existing=None,
            is_initial=True,
            before=[],
            after=[incoming],
        )

        assert result == ValidationResult(valid=True, is_composable=True, errors=[], changes=[])
        orchestrator.validate.assert_awaited_once()
        orchestrator.build.assert_not_called()
        inspector.diff.assert_not_called()

    @pytest.mark.asyncio
    async def test_initial_schema_with_composition_errors(self, validator, orchestrator):
        orchestrator.validate.return_value = [SchemaError(message="Unknown type \"Post\".")]

        result = await _validate(validator, orchestrator, existing=None, is_initial=True)

        assert result.valid is False
        assert result.is_composable is False
        assert result.errors == [SchemaError(message="Unknown type \"Post\".")]
        assert result.changes == []

    @pytest.mark.asyncio
    async def test_initial_schema_never_reports_changes(self, validator, orchestrator, inspector):
        inspector.diff.return_value = [_breaking()]

        result = await _validate(validator, orchestrator, is_initial=True)

        assert result.valid is True
        assert result.changes == []
        inspector.diff.assert_not_called()


# --- Identity short-circuit ---


class TestIdentity:
    @pytest.mark.asyncio
    async def test_identical_schema_short_circuits(self, validator, orchestrator, inspector):
        incoming = _schema(USERS_V1)
        existing = _schema(USERS_V1)
        orchestrator.validate.return_value = [SchemaError(message="never seen")]

        result = await _validate(
            validator,
            orchestrator,
            incoming=incoming,
            existing=existing,
            before=[existing],
            after=[incoming],
        )

        assert result == ValidationResult(valid=True, is_composable=True, errors=[], changes=[])
        orchestrator.validate.assert_not_called()
        orchestrator.build.assert_not_called()
        inspector.diff.assert_not_called()

    @pytest.mark.asyncio
    async def test_identity_ignores_initial_flag_and_policy(self, validator, orchestrator):
        schema = _schema(USERS_V1)

        result = await _validate(
            validator,
            orchestrator,
            incoming=schema,
            existing=_schema(USERS_V1),
            is_initial=True,
            accept_breaking_changes=True,
        )

        assert result.valid is True
        assert result.errors == []
        orchestrator.validate.assert_not_called()

    @pytest.mark.asyncio
    async def test_reformatted_schema_is_not_identical(self, validator, orchestrator):
        """Only the content hash decides identity, so whitespace changes still validate."""
        existing = _schema(USERS_V1)
        incoming = _schema(USERS_V1.replace("  ", "    "))

        await _validate(
            validator,
            orchestrator,
            incoming=incoming,
            existing=existing,
            before=[existing],
            after=[incoming],
        )

        orchestrator.validate.assert_awaited_once()


# --- Composability ---


class TestComposability:
    @pytest.mark.asyncio
    async def test_external_composition_passed_when_enabled(self, validator, orchestrator):
        external = ExternalComposition(enabled=True, endpoint="https://compose.test", secret="s")
        project = Project(external_composition=external)

        await _validate(validator, orchestrator, project=project)

        _, config = orchestrator.validate.call_args.args
        assert config is external

    @pytest.mark.asyncio
    async def test_external_composition_absent_when_disabled(self, validator, orchestrator):
        external = ExternalComposition(enabled=False, endpoint="https://compose.test", secret="s")
        project = Project(external_composition=external)

        await _validate(validator, orchestrator, project=project)

        _, config = orchestrator.validate.call_args.args
        assert config is None
        # Builds always receive the project's settings
        for call in orchestrator.build.call_args_list:
            assert call.args[1] is external

    @pytest.mark.asyncio
    async def test_composition_errors_are_not_waived(self, validator, orchestrator, inspector):
        orchestrator.validate.return_value = [SchemaError(message="Type User defined twice")]
        inspector.diff.return_value = [_breaking()]

        result = await _validate(validator, orchestrator, accept_breaking_changes=True)

        assert result.valid is False
        assert result.errors == [SchemaError(message="Type User defined twice")]
        assert result.changes == [_breaking()]


# --- Diff and breaking-change policy ---


class TestBreakingChanges:
    @pytest.mark.asyncio
    async def test_no_changes_is_valid(self, validator, orchestrator, inspector):
        result = await _validate(validator, orchestrator)

        assert result == ValidationResult(valid=True, is_composable=True, errors=[], changes=[])
        inspector.diff.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_diff_receives_built_schemas_and_selector(
        self, validator, orchestrator, inspector
    ):
        await _validate(validator, orchestrator)

        existing_schema, incoming_schema, selector = inspector.diff.call_args.args
        assert isinstance(existing_schema, GraphQLSchema)
        assert isinstance(incoming_schema, GraphQLSchema)
        assert "name" in existing_schema.get_type("User").fields
        assert "fullName" in incoming_schema.get_type("User").fields
        assert selector == SELECTOR

    @pytest.mark.asyncio
    async def test_breaking_change_rejected(self, validator, orchestrator, inspector):
        inspector.diff.return_value = [_breaking(), _dangerous()]

        result = await _validate(validator, orchestrator)

        assert result.valid is False
        assert result.is_composable is False
        assert result.errors == [
            SchemaError(message="Breaking Change: User.name was removed.", path=["User", "name"])
        ]
        assert result.changes == [_breaking(), _dangerous()]

    @pytest.mark.asyncio
    async def test_breaking_change_accepted(self, validator, orchestrator, inspector):
        inspector.diff.return_value = [_breaking(), _dangerous()]

        result = await _validate(validator, orchestrator, accept_breaking_changes=True)

        assert result.valid is True
        assert result.is_composable is True
        assert result.errors == []
        assert result.changes == [_breaking(), _dangerous()]

    @pytest.mark.asyncio
    async def test_one_error_per_breaking_change_in_order(self, validator, orchestrator, inspector):
        first = _breaking("Query.user was removed.", ("Query", "user"))
        second = _breaking("User.name was removed.", ("User", "name"))
        inspector.diff.return_value = [first, _dangerous(), second]

        result = await _validate(validator, orchestrator)

        assert [e.message for e in result.errors] == [
            "Breaking Change: Query.user was removed.",
            "Breaking Change: User.name was removed.",
        ]
        assert [e.path for e in result.errors] == [["Query", "user"], ["User", "name"]]
        assert result.changes == [first, _dangerous(), second]

    @pytest.mark.asyncio
    async def test_dangerous_changes_only_is_valid(self, validator, orchestrator, inspector):
        inspector.diff.return_value = [_dangerous()]

        result = await _validate(validator, orchestrator)

        assert result.valid is True
        assert result.changes == [_dangerous()]

    @pytest.mark.asyncio
    async def test_breaking_errors_follow_composition_errors(
        self, validator, orchestrator, inspector
    ):
        orchestrator.validate.return_value = [SchemaError(message="composition")]
        inspector.diff.return_value = [_breaking()]

        result = await _validate(validator, orchestrator)

        assert [e.message for e in result.errors] == [
            "composition",
            "Breaking Change: User.name was removed.",
        ]


# --- Before/after build ---


class TestBuild:
    @pytest.mark.asyncio
    async def test_missing_before_build_skips_diff(self, validator, orchestrator, inspector):
        async def build(schemas, config):
            return None if schemas and schemas[0].raw == USERS_V1 else schemas[0]

        orchestrator.build.side_effect = build
        orchestrator.validate.return_value = [SchemaError(message="composition")]

        result = await _validate(validator, orchestrator)

        assert result.changes == []
        assert result.errors == [SchemaError(message="composition")]
        inspector.diff.assert_not_called()

    @pytest.mark.asyncio
    async def test_builds_run_concurrently(self, validator, orchestrator):
        existing = _schema(USERS_V1)
        incoming = _schema(USERS_V2)
        after_started = asyncio.Event()

        async def build(schemas, config):
            if schemas[0] is existing:
                # Deadlocks (and times out) unless the after build runs alongside
                await asyncio.wait_for(after_started.wait(), timeout=1)
            else:
                after_started.set()
            return schemas[0]

        orchestrator.build.side_effect = build

        result = await _validate(
            validator,
            orchestrator,
            incoming=incoming,
            existing=existing,
            before=[existing],
            after=[incoming],
        )

        assert result.valid is True
        assert orchestrator.build.await_count == 2

    @pytest.mark.asyncio
    async def test_build_failure_becomes_one_error(self, validator, orchestrator, inspector):
        orchestrator.validate.return_value = [SchemaError(message="composition")]
        orchestrator.build.side_effect = RuntimeError("composition service unavailable")

        result = await _validate(validator, orchestrator)

        assert result.valid is False
        assert result.errors == [
            SchemaError(message="composition"),
            SchemaError(message="Failed to compare schemas: composition service unavailable"),
        ]
        assert result.changes == []
        inspector.diff.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_after_build_becomes_one_error(self, validator, orchestrator):
        async def build(schemas, config):
            return schemas[0] if schemas[0].raw == USERS_V1 else None

        orchestrator.build.side_effect = build

        result = await _validate(validator, orchestrator)

        assert len(result.errors) == 1
        assert result.errors[0].message.startswith("Failed to compare schemas: ")
        _assert_consistent(result)

    @pytest.mark.asyncio
    async def test_diff_failure_becomes_one_error(self, validator, orchestrator, inspector):
        inspector.diff.side_effect = ValueError("cannot diff")

        result = await _validate(validator, orchestrator, accept_breaking_changes=True)

        assert result.valid is False
        assert result.errors == [SchemaError(message="Failed to compare schemas: cannot diff")]
        assert result.changes == []

    @pytest.mark.asyncio
    async def test_diff_builds_receive_unmerged_subschemas(self, validator, orchestrator, inspector):
        existing = _schema(USERS_V1)
        incoming = _schema(USERS_V2)

        result = await _validate(
            validator,
            orchestrator,
            existing=existing,
            incoming=incoming,
            before=[existing],
            after=[incoming],
            base_schema="scalar DateTime\n",
        )

        before_call, after_call = orchestrator.build.call_args_list
        assert before_call.args[0][0] is existing
        assert after_call.args[0][0] is incoming
        assert after_call.args[0][0].raw == USERS_V2
        validated, _ = orchestrator.validate.call_args.args
        assert validated[0].raw == "scalar DateTime\n" + USERS_V2
        assert result.valid is True
        inspector.diff.assert_awaited_once()


# --- Base schema injection ---


class TestBaseSchema:
    @pytest.mark.asyncio
    async def test_base_schema_merged_into_first_subschema_only(self, validator, orchestrator):
        users = _schema(USERS_V2)
        posts = _schema(POSTS, source="posts")
        base = "scalar DateTime\n"

        await _validate(validator, orchestrator, incoming=users, after=[users, posts], base_schema=base)

        validated, _ = orchestrator.validate.call_args.args
        assert len(validated) == 2
        assert validated[0].raw == base + USERS_V2
        assert validated[0].source == "users"
        names = [d.name.value for d in validated[0].document.definitions]
        assert names == ["DateTime", "Query", "User"]
        assert validated[1] is posts

    @pytest.mark.asyncio
    async def test_empty_base_schema_is_ignored(self, validator, orchestrator):
        incoming = _schema(USERS_V2)

        await _validate(validator, orchestrator, incoming=incoming, after=[incoming], base_schema="")

        validated, _ = orchestrator.validate.call_args.args
        assert validated[0] is incoming

    @pytest.mark.asyncio
    async def test_invalid_base_schema_raises(self, validator, orchestrator):
        with pytest.raises(SchemaParseError):
            await _validate(validator, orchestrator, base_schema="type {")

        orchestrator.validate.assert_not_called()


# --- Result consistency ---


class TestResultConsistency:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "composition_errors,changes,accept",
        [
            ([], [], False),
            ([SchemaError(message="x")], [], False),
            ([], [_breaking()], False),
            ([], [_breaking()], True),
            ([SchemaError(message="x")], [_breaking(), _dangerous()], True),
        ],
    )
    async def test_valid_matches_errors(
        self, validator, orchestrator, inspector, composition_errors, changes, accept
    ):
        orchestrator.validate.return_value = composition_errors
        inspector.diff.return_value = changes

        result = await _validate(validator, orchestrator, accept_breaking_changes=accept)

        _assert_consistent(result)

    def test_from_errors(self):
        assert ValidationResult.from_errors([]) == ValidationResult(valid=True, is_composable=True)
        result = ValidationResult.from_errors([SchemaError(message="x")], [_dangerous()])
        assert result.valid is False
        assert result.is_composable is False
        assert result.changes == [_dangerous()]
