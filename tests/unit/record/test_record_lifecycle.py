"""
dash-record - unit tests for record construction, reads, and writes

File: tests/unit/record/test_record_lifecycle.py

Purpose
- Validate the instance lifecycle of a record type: default materialization,
  required rules, deferred values, and read-side hooks.

What this test file should cover
- Construction from mappings, pairs, and keyword arguments.
- Static, property-referencing, and computed required rules with messages.
- Deferred defaults with and without caching, and constraint checks at resolution.
- The ``missing`` factory and read observers.

Functional requirements
- A failing write leaves the stored value untouched.
- Materialized defaults are independent between instances.
"""

from __future__ import annotations

import itertools
import re

import pytest

from dash_record import (
    ConstraintViolationError,
    Deferred,
    InvalidConstraintDeclarationError,
    Property,
    Record,
    RequiredPropertyError,
    UnknownPropertyError,
    deferred,
)


class Person(Record):
    name = Property(required=True)
    email = Property()
    occupation = Property(default="Worker")


class Shipment(Record):
    express = Property(default=False)
    courier = Property(required="express")


class Invoice(Record):
    total = Property(default=0)
    approver = Property(required="needs_approval", message="must be set for large invoices.")

    def needs_approval(self) -> bool:
        return self.total > 1000


class Account(Record):
    kind = Property(default="personal")
    tax_id = Property(required=lambda record: record.kind == "business")


def test_person_scenario() -> None:
    with pytest.raises(
        RequiredPropertyError, match=r"^The property 'name' is required for Person\.$"
    ):
        Person({})

    bob = Person({"name": "Bob"})
    assert bob.read("occupation") == "Worker"

    bob.write("occupation", None)
    assert bob.read("occupation") is None
    bob.update({})
    assert bob.read("occupation") == "Worker"


def test_construction_accepts_mappings_pairs_and_keywords() -> None:
    from_mapping = Person({"name": "Bob", "email": "bob@example.com"})
    from_pairs = Person([("name", "Bob"), ("email", "bob@example.com")])
    from_kwargs = Person(name="Bob", email="bob@example.com")

    assert from_mapping == from_pairs == from_kwargs
    assert from_kwargs.name == "Bob"


def test_keyword_arguments_win_over_positional_attributes() -> None:
    person = Person({"name": "Bob"}, name="Robert")

    assert person.name == "Robert"


def test_defaults_are_stored_and_undefaulted_properties_are_absent() -> None:
    person = Person(name="Bob")

    assert "occupation" in person
    assert "email" not in person
    assert person.read("email") is None
    assert len(person) == 2


def test_unknown_property_on_construction() -> None:
    with pytest.raises(
        UnknownPropertyError, match=r"^The property 'bork' is not defined for Person\.$"
    ) as excinfo:
        Person(name="Bob", bork="")

    assert isinstance(excinfo.value, KeyError)
    assert isinstance(excinfo.value, AttributeError)
    assert excinfo.value.property_name == "bork"
    assert excinfo.value.record_type == "Person"


def test_unknown_property_on_read_and_write() -> None:
    person = Person(name="Bob")

    with pytest.raises(UnknownPropertyError):
        person.read("nonexistent")
    with pytest.raises(UnknownPropertyError):
        person.write("nonexistent", 123)
    assert "nonexistent" not in person


def test_none_attributes_are_accepted() -> None:
    class Optional(Record):
        note = Property()

    assert len(Optional(None)) == 0


def test_writing_none_to_required_property_keeps_previous_value() -> None:
    person = Person(name="Bob")

    with pytest.raises(RequiredPropertyError):
        person.write("name", None)

    assert person.name == "Bob"


def test_materialized_defaults_are_independent_between_instances() -> None:
    class Tagged(Record):
        aliases = Property(default=["Snake"])
        settings = Property(default={"nested": ["a"]})

    first = Tagged()
    first.aliases.append("El Rey")
    first.settings["nested"].append("b")

    second = Tagged()
    assert second.aliases == ["Snake"]
    assert second.settings == {"nested": ["a"]}
    assert Tagged.declared_defaults()["aliases"] == ["Snake"]


def test_conditional_requirement_on_another_property() -> None:
    assert Shipment().courier is None

    with pytest.raises(RequiredPropertyError, match="'courier' is required for Shipment"):
        Shipment(express=True)

    assert Shipment(courier="DHL", express=True).courier == "DHL"


def test_conditional_requirement_on_a_named_predicate_method() -> None:
    assert Invoice(total=10).approver is None

    with pytest.raises(
        RequiredPropertyError,
        match=r"^The property 'approver' must be set for large invoices\.$",
    ) as excinfo:
        Invoice(total=5000)

    assert excinfo.value.custom_message == "must be set for large invoices."


def test_computed_requirement() -> None:
    assert Account().tax_id is None

    with pytest.raises(RequiredPropertyError, match="tax_id"):
        Account(kind="business")

    assert Account(kind="business", tax_id="DE123").tax_id == "DE123"


def test_custom_message_for_static_requirement() -> None:
    class Signup(Record):
        handle = Property(required=True, message="cannot be blank.")

    with pytest.raises(RequiredPropertyError, match=r"^The property 'handle' cannot be blank\.$"):
        Signup()


def test_message_without_required_rule_is_rejected() -> None:
    with pytest.raises(
        InvalidConstraintDeclarationError,
        match=r"^The constraint key 'message' is invalid for 'note' for Note\.$",
    ):

        class Note(Record):
            note = Property(message="whatever")


def test_unhashable_required_option_is_rejected() -> None:
    class Draft(Record):
        pass

    with pytest.raises(InvalidConstraintDeclarationError, match="constraint key 'required'"):
        Draft.declare_property("body", required=["not", "hashable"])

    assert not Draft.has_property("body")


def test_required_false_declares_no_rule() -> None:
    class Loose(Record):
        note = Property(required=False)

    assert not Loose.is_required("note")
    assert Loose().note is None


def test_deferred_default_is_cached_after_first_read() -> None:
    class Stamped(Record):
        created_at = Property(default=deferred(object))

    stamped = Stamped()
    assert isinstance(stamped._raw_get("created_at"), Deferred)

    first = stamped.created_at
    assert stamped.created_at is first
    assert stamped._raw_get("created_at") is first


def test_deferred_default_without_cache_is_recomputed() -> None:
    counter = itertools.count()

    class Ticket(Record):
        number = Property(default=deferred(lambda: next(counter)), deferred_cache=False)

    ticket = Ticket()
    assert ticket.number == 0
    assert ticket.number == 1
    assert isinstance(ticket._raw_get("number"), Deferred)


def test_written_deferred_values_follow_property_cache_flag() -> None:
    class Cached(Record):
        normal = Property()
        uncached = Property(deferred_cache=False)

    record = Cached(normal=deferred(object), uncached=deferred(object))

    assert record.normal is record.normal
    assert record.uncached is not record.uncached


def test_deferred_value_is_validated_when_resolved() -> None:
    class Bounded(Record):
        level = Property(default=deferred(lambda: -1), constraints={"type": int, "minimum": 0})

    bounded = Bounded()

    with pytest.raises(
        ConstraintViolationError,
        match=re.escape(
            "The value '-1:int' does not meet the constraints of the property 'level' "
            "for Bounded."
        ),
    ):
        bounded.read("level")
    assert isinstance(bounded._raw_get("level"), Deferred)


def test_deferred_requires_a_callable() -> None:
    with pytest.raises(TypeError, match="expected callable"):
        deferred(5)  # type: ignore[arg-type]


def test_missing_factory_supplies_values_for_absent_properties() -> None:
    person = Person(missing=lambda record, key: str(key).upper())

    assert person.name == "NAME"
    assert person.email == "EMAIL"
    assert person.occupation == "Worker"
    assert "email" not in person


def test_missing_factory_does_not_open_undeclared_names() -> None:
    person = Person(name="Bob", missing=lambda record, key: "fallback")

    with pytest.raises(UnknownPropertyError):
        person.read("nonexistent")


def test_read_observer_receives_the_resolved_value() -> None:
    seen: list[object] = []
    person = Person(name="Bob")

    assert person.read("name", seen.append) == "Bob"
    assert person.read("email", seen.append) is None
    assert seen == ["Bob", None]


def test_required_reference_must_resolve_when_declared() -> None:
    with pytest.raises(
        InvalidConstraintDeclarationError,
        match=r"^The constraint key 'required' is invalid for 'courier' for Parcel\.$",
    ):

        class Parcel(Record):
            courier = Property(required="no_such_thing")

    class Draft(Record):
        pass

    with pytest.raises(InvalidConstraintDeclarationError, match="constraint key 'required'"):
        Draft.declare_property("body", required="no_such_thing")
    assert not Draft.has_property("body")


def test_required_reference_may_point_later_in_the_class_body() -> None:
    class Parcel(Record):
        courier = Property(required="express")
        express = Property(default=False)

    assert Parcel().courier is None
    with pytest.raises(RequiredPropertyError, match="'courier' is required for Parcel"):
        Parcel(express=True)


def test_plain_callable_default_is_stored_verbatim() -> None:
    def label() -> str:
        return "computed"

    class Hooks(Record):
        callback = Property(default=label)
        computed = Property(default=deferred(label))

    hooks = Hooks()

    assert hooks.callback is label
    assert hooks.computed == "computed"
