"""
Unit tests for FactoryEngine: instance, create, seed, and teardown.
"""

from __future__ import annotations

from typing import Any

import pytest

from fixturemill import (
    AggregateDeleteError,
    Association,
    EngineSettings,
    FactoryEngine,
    Literal,
    NoDefinedFactoryError,
    SaveFailedError,
    SaveMethodNotFoundError,
    SettingsError,
    UnknownGeneratorError,
    load_settings,
)
from tests.models import (
    DELETE_LOG,
    SAVE_LOG,
    BrokenDelete,
    Company,
    Invalid,
    NoDelete,
    NoSave,
    Persisted,
    Profile,
    SilentlyInvalid,
    Team,
    User,
)


class TestInstance:
    """Tests for FactoryEngine.instance()."""

    def test_builds_populated_instance(self, user_engine: FactoryEngine) -> None:
        user = user_engine.instance(User)

        assert isinstance(user, User)
        assert isinstance(user.name, str) and user.name
        assert "@" in user.email
        assert 18 <= user.age <= 90
        assert isinstance(user.team, Team)

    def test_does_not_save_or_record(self, engine: FactoryEngine) -> None:
        engine.define(Profile, {"bio": "sentence"})
        profile = engine.instance(Profile)

        assert SAVE_LOG == []
        assert engine.saved() == []
        assert not engine.is_saved(profile)

    def test_associations_are_still_created(self, user_engine: FactoryEngine) -> None:
        user = user_engine.instance(User)

        assert not user_engine.is_saved(user)
        assert user_engine.is_saved(user.team)
        assert user_engine.is_saved(user.team.company)

    def test_overrides(self, user_engine: FactoryEngine) -> None:
        team = Team()
        user = user_engine.instance(User, {"name": "Ada", "team": team, "nickname": "ada"})

        assert user.name == "Ada"
        assert user.team is team
        assert user.nickname == "ada"
        assert user_engine.saved() == []

    def test_by_name(self, user_engine: FactoryEngine) -> None:
        assert isinstance(user_engine.instance("User"), User)
        assert isinstance(user_engine.instance("tests.models.User"), User)

    def test_unregistered_model(self, engine: FactoryEngine) -> None:
        with pytest.raises(NoDefinedFactoryError):
            engine.instance(User)

    def test_attributes_need_not_be_declared_on_model(
        self, engine: FactoryEngine
    ) -> None:
        engine.define(Profile, {"anything": Literal(1), "other": Literal("x")})
        profile = engine.instance(Profile)
        assert (profile.anything, profile.other) == (1, "x")

    def test_each_attribute_is_assigned_once(self, engine: FactoryEngine) -> None:
        class Recorded:
            def __init__(self) -> None:
                object.__setattr__(self, "assigned", [])

            def __setattr__(self, name: str, value: Any) -> None:
                self.assigned.append(name)
                object.__setattr__(self, name, value)

        engine.define(Recorded, {"name": "name", "role": Literal("member")})
        obj = engine.instance(Recorded, {"role": "admin"})

        assert obj.assigned == ["role", "name"]
        assert obj.role == "admin"

    def test_unknown_generator_aborts(self, engine: FactoryEngine) -> None:
        engine.define(Profile, {"bio": "no_such_generator"})
        with pytest.raises(UnknownGeneratorError):
            engine.instance(Profile)


class TestCreate:
    """Tests for FactoryEngine.create()."""

    def test_saves_and_records_once(self, engine: FactoryEngine) -> None:
        engine.define(Profile, {"bio": "sentence"})
        profile = engine.create(Profile)

        assert SAVE_LOG == [profile]
        assert engine.saved() == [profile]
        assert engine.is_saved(profile)

    def test_missing_save_method(self, engine: FactoryEngine) -> None:
        engine.define(NoSave, {})
        with pytest.raises(SaveMethodNotFoundError) as exc_info:
            engine.create(NoSave)

        assert exc_info.value.method == "save"
        assert engine.saved() == []

    def test_save_failure_carries_validation_errors(self, engine: FactoryEngine) -> None:
        engine.define(Invalid, {"email": "email"})
        with pytest.raises(SaveFailedError) as exc_info:
            engine.create(Invalid)

        assert exc_info.value.validation_errors == {"email": ["is invalid"]}
        assert "is invalid" in str(exc_info.value)
        assert engine.saved() == []

    def test_save_failure_without_detail(self, engine: FactoryEngine) -> None:
        engine.define(SilentlyInvalid, {})
        with pytest.raises(SaveFailedError) as exc_info:
            engine.create(SilentlyInvalid)

        assert exc_info.value.validation_errors is None
        assert exc_info.value.model == "tests.models.SilentlyInvalid"

    def test_custom_save_method(self, engine: FactoryEngine) -> None:
        engine.define(Persisted, {})
        engine.set_save_method("store")
        obj = engine.create(Persisted)
        assert SAVE_LOG == [obj]

    def test_invalid_save_method_name(self, engine: FactoryEngine) -> None:
        with pytest.raises(SettingsError):
            engine.set_save_method("not a method")

    def test_nested_associations_precede_outer_save(self, user_engine: FactoryEngine) -> None:
        user = user_engine.create(User)

        team = user.team
        company = team.company
        assert SAVE_LOG == [company, team, user]
        assert user_engine.saved() == [company, team, user]

    def test_association_with_overrides_and_attribute(self, engine: FactoryEngine) -> None:
        engine.define(Company, {"name": "company", "id": Literal(17)})
        engine.define(
            Team,
            {
                "company_id": Association(Company, {"name": "Initech"}, attribute="id"),
                "name": lambda team: f"team-{team.company_id}",
            },
        )
        team = engine.create(Team)

        company = engine.saved()[0]
        assert company.name == "Initech"
        assert team.company_id == 17
        assert team.name == "team-17"

    def test_nested_failure_propagates(self, engine: FactoryEngine) -> None:
        engine.define(Team, {"company": "factory|Company"})
        with pytest.raises(NoDefinedFactoryError):
            engine.create(Team)
        assert engine.saved() == []

    def test_nested_save_failure_propagates(self, engine: FactoryEngine) -> None:
        engine.define(Invalid, {})
        engine.define(Team, {"invalid": Association(Invalid)})
        with pytest.raises(SaveFailedError):
            engine.create(Team)
        assert SAVE_LOG == []


class TestSeed:
    """Tests for FactoryEngine.seed()."""

    def test_returns_requested_count(self, engine: FactoryEngine) -> None:
        engine.define(Profile, {"bio": "sentence"})
        profiles = engine.seed(Profile, 5)

        assert len(profiles) == 5
        assert engine.saved() == profiles
        assert len({id(p) for p in profiles}) == 5

    def test_zero(self, engine: FactoryEngine) -> None:
        engine.define(Profile, {})
        assert engine.seed(Profile, 0) == []

    def test_negative(self, engine: FactoryEngine) -> None:
        engine.define(Profile, {})
        with pytest.raises(ValueError):
            engine.seed(Profile, -1)

    def test_overrides_apply_to_each(self, engine: FactoryEngine) -> None:
        engine.define(Profile, {"bio": "sentence"})
        profiles = engine.seed(Profile, 3, {"bio": "same"})
        assert [p.bio for p in profiles] == ["same", "same", "same"]

    def test_failure_aborts_batch(self, engine: FactoryEngine) -> None:
        calls = {"count": 0}

        def third_call_fails(profile: Any) -> int:
            calls["count"] += 1
            if calls["count"] == 3:
                raise RuntimeError("boom")
            return calls["count"]

        engine.define(Profile, {"n": third_call_fails})
        result = None
        with pytest.raises(RuntimeError, match="boom"):
            result = engine.seed(Profile, 5)

        assert result is None
        assert len(engine.saved()) == 2


class TestAttributesFor:
    """Tests for attributes_for() and generate_attr()."""

    def test_round_trip_matches_instance(self, engine: FactoryEngine) -> None:
        engine.define(
            User,
            {
                "name": "name",
                "role": "call|default_role",
                "slug": lambda user: User.make_slug(user.name),
            },
        )

        probe = User()
        attributes = engine.attributes_for(probe, {"team": None})
        fresh = User()
        for key, value in attributes.items():
            setattr(fresh, key, value)

        built = engine.instance(User, attributes)
        for key in attributes:
            assert getattr(fresh, key) == getattr(built, key)
        assert fresh.slug == User.make_slug(fresh.name)
        assert fresh.role == "member"

    def test_accepts_model_type(self, user_engine: FactoryEngine) -> None:
        attributes = user_engine.attributes_for(Company, {"extra": 1})
        assert set(attributes) == {"name", "extra"}

    def test_unregistered(self, engine: FactoryEngine) -> None:
        with pytest.raises(NoDefinedFactoryError):
            engine.attributes_for(User())

    def test_generate_attr(self, engine: FactoryEngine) -> None:
        assert "@" in engine.generate_attr("email")
        assert engine.generate_attr(Literal("email")) == "email"
        assert engine.generate_attr("call|make_slug|A B", User()) == "a-b"


class TestDeleteSaved:
    """Tests for delete_saved()."""

    def test_deletes_everything_newest_first(self, user_engine: FactoryEngine) -> None:
        user = user_engine.create(User)
        user_engine.delete_saved()

        assert DELETE_LOG == [user, user.team, user.team.company]
        assert user_engine.saved() == []

    def test_partial_failure(self, engine: FactoryEngine) -> None:
        engine.define(Profile, {})
        engine.define(NoDelete, {})
        engine.define(BrokenDelete, {})
        good = engine.seed(Profile, 2)
        engine.create(NoDelete)
        engine.create(BrokenDelete)

        with pytest.raises(AggregateDeleteError) as exc_info:
            engine.delete_saved()

        assert len(exc_info.value.errors) == 2
        assert engine.saved() == []
        assert set(map(id, DELETE_LOG)) == set(map(id, good))

    def test_custom_delete_method(self, engine: FactoryEngine) -> None:
        engine.define(Persisted, {})
        engine.set_save_method("store")
        engine.set_delete_method("destroy")
        obj = engine.create(Persisted)
        engine.delete_saved()
        assert DELETE_LOG == [obj]

    def test_empty_ledger(self, engine: FactoryEngine) -> None:
        engine.delete_saved()
        assert engine.saved() == []


class TestConfiguration:
    """Tests for engine settings and locale handling."""

    def test_defaults(self) -> None:
        engine = FactoryEngine()
        assert engine.settings == EngineSettings()
        assert engine.settings.save_method == "save"
        assert engine.settings.delete_method == "delete"

    def test_arguments_override_settings(self) -> None:
        settings = EngineSettings(save_method="store", locale="de_DE")
        engine = FactoryEngine(settings, locale="fr_FR")
        assert engine.settings.save_method == "store"
        assert engine.settings.locale == "fr_FR"

    def test_seed_is_reproducible(self) -> None:
        first, second = FactoryEngine(seed=7), FactoryEngine(seed=7)
        for engine in (first, second):
            engine.define(Profile, {"name": "name", "email": "email"})

        a = first.attributes_for(Profile)
        b = second.attributes_for(Profile)
        assert a == b

    def test_set_locale_rebuilds_provider(self, engine: FactoryEngine) -> None:
        old_faker = engine.faker
        engine.set_locale("de_DE")

        assert engine.faker is not old_faker
        assert engine.resolver.provider is engine.faker
        assert engine.settings.locale == "de_DE"
        assert engine.faker.locales == ["de_DE"]

    def test_unknown_locale(self) -> None:
        with pytest.raises(SettingsError, match="xx_XX"):
            FactoryEngine(locale="xx_XX")

    def test_unknown_locale_from_settings(self) -> None:
        with pytest.raises(SettingsError):
            FactoryEngine(load_settings({"FIXTUREMILL_LOCALE": "xx_XX"}))

    def test_set_unknown_locale_keeps_current_provider(self, engine: FactoryEngine) -> None:
        old_faker = engine.faker

        with pytest.raises(SettingsError):
            engine.set_locale("xx_XX")

        assert engine.settings.locale == "en_US"
        assert engine.faker is old_faker
        assert engine.resolver.provider is old_faker
