"""Tests for the context_builder module."""

import logging

import pytest

from ormgen.config import GeneratorOptions
from ormgen.context_builder import build_context, resolve_table_name, with_auto_fields
from ormgen.errors import ModelDefinitionError, UnsupportedFieldType
from ormgen.model import FieldDescriptor, FieldType, ModelDescriptor


def _model(*fields, **kwargs) -> ModelDescriptor:
    return ModelDescriptor(
        class_name=kwargs.pop("class_name", "Thing"),
        fields=tuple(FieldDescriptor.of(name, t) for name, t in fields),
        **kwargs,
    )


class TestQueryDescriptor:
    """Table identity, field order and positional decoders."""

    @pytest.fixture(autouse=True)
    def _context(self, user_model, plain_options):
        self.ctx = build_context(user_model, plain_options)
        self.query = self.ctx["query"]

    def test_field_order(self):
        """Field names keep declaration order exactly."""
        assert self.query["field_names"] == ["id", "name", "active", "createdAt"]

    def test_class_names(self):
        assert self.query["class_name"] == "UserQuery"
        assert self.query["where_class_name"] == "UserQueryWhere"
        assert self.ctx["where"]["class_name"] == "UserQueryWhere"

    def test_derived_table_name(self):
        assert self.query["table_name"] == "users"

    def test_decoders_positional(self):
        """Decoder i reads row[i] for fields[i]."""
        decoders = self.query["decoders"]
        assert [d["index"] for d in decoders] == [0, 1, 2, 3]
        assert [d["name"] for d in decoders] == self.query["field_names"]

    def test_decoder_casts(self):
        casts = [d["cast"] for d in self.query["decoders"]]
        assert casts == ["as_int", "as_string", "as_bool", "as_datetime"]

    def test_runtime_imports_sorted(self):
        imports = self.ctx["runtime_imports"]
        assert imports == sorted(imports)
        assert "Query" in imports and "QueryWhere" in imports
        assert "DateTimeSqlExpressionBuilder" in imports


class TestTableName:
    def test_explicit_table_name(self):
        """An explicit table name is used verbatim."""
        model = _model(("name", "String"), table_name="Legacy_Users")
        assert resolve_table_name(model) == "Legacy_Users"
        ctx = build_context(model, GeneratorOptions())
        assert ctx["query"]["table_name"] == "Legacy_Users"

    def test_derived_from_class_name(self):
        model = _model(("name", "String"), class_name="UserProfile")
        assert resolve_table_name(model) == "user_profiles"


class TestBuilderMapping:
    """Each field type maps to exactly one builder kind."""

    @pytest.mark.parametrize("declared, builder, numeric", [
        ("String", "StringSqlExpressionBuilder", None),
        ("Bool", "BooleanSqlExpressionBuilder", None),
        ("DateTime", "DateTimeSqlExpressionBuilder", None),
        ("Int", "NumericSqlExpressionBuilder", "int"),
        ("Double", "NumericSqlExpressionBuilder", "float"),
    ])
    def test_mapping(self, declared, builder, numeric):
        ctx = build_context(_model(("value", declared)), GeneratorOptions(auto_id_and_date_fields=False))
        (b,) = ctx["where"]["builders"]
        assert b["builder"] == builder
        assert b["numeric_type"] == numeric

    def test_python_types_accepted(self):
        from datetime import datetime
        model = _model(("a", str), ("b", bool), ("c", datetime), ("d", int), ("e", float))
        ctx = build_context(model, GeneratorOptions(auto_id_and_date_fields=False))
        kinds = [b["builder"] for b in ctx["where"]["builders"]]
        assert kinds == [
            "StringSqlExpressionBuilder",
            "BooleanSqlExpressionBuilder",
            "DateTimeSqlExpressionBuilder",
            "NumericSqlExpressionBuilder",
            "NumericSqlExpressionBuilder",
        ]


class TestColumnNames:
    def test_snake_case_columns(self, user_model, plain_options):
        ctx = build_context(user_model, plain_options)
        columns = [b["column"] for b in ctx["where"]["builders"]]
        assert columns == ["id", "name", "active", "created_at"]

    def test_verbatim_columns(self, user_model):
        options = GeneratorOptions(auto_snake_case_names=False, auto_id_and_date_fields=False)
        ctx = build_context(user_model, options)
        columns = [b["column"] for b in ctx["where"]["builders"]]
        assert columns == ["id", "name", "active", "createdAt"]

    def test_builder_attribute_keeps_field_name(self, user_model, plain_options):
        ctx = build_context(user_model, plain_options)
        assert ctx["where"]["builders"][3]["name"] == "createdAt"


class TestAutoFields:
    """auto_id_and_date_fields adds id first and timestamps last."""

    def test_added(self):
        ctx = build_context(_model(("title", "String")), GeneratorOptions())
        assert ctx["query"]["field_names"] == ["id", "title", "createdAt", "updatedAt"]

    def test_auto_field_types(self):
        fields = with_auto_fields((FieldDescriptor("title", FieldType.STRING),))
        types = {f.name: f.type for f in fields}
        assert types["id"] is FieldType.STRING
        assert types["createdAt"] is FieldType.DATETIME
        assert types["updatedAt"] is FieldType.DATETIME

    def test_declared_fields_not_duplicated(self, user_model):
        """Declared id/createdAt keep their position and type."""
        ctx = build_context(user_model, GeneratorOptions())
        assert ctx["query"]["field_names"] == ["id", "name", "active", "createdAt", "updatedAt"]
        assert ctx["query"]["decoders"][0]["cast"] == "as_int"

    def test_snake_case_declaration_suppresses(self):
        ctx = build_context(_model(("created_at", "DateTime")), GeneratorOptions())
        assert ctx["query"]["field_names"] == ["id", "created_at", "updatedAt"]

    def test_disabled(self):
        ctx = build_context(_model(("title", "String")), GeneratorOptions(auto_id_and_date_fields=False))
        assert ctx["query"]["field_names"] == ["title"]

    def test_per_model_override(self):
        model = _model(("title", "String"), options={"auto_id_and_date_fields": False})
        ctx = build_context(model, GeneratorOptions())
        assert ctx["query"]["field_names"] == ["title"]


class TestValidation:
    """Invalid models fail before any context is produced."""

    def test_unsupported_type(self):
        model = _model(("name", "String"), ("address", "Address"))
        with pytest.raises(UnsupportedFieldType) as excinfo:
            build_context(model, GeneratorOptions())
        assert excinfo.value.field == "address"
        assert excinfo.value.type_name == "Address"
        assert "address" in str(excinfo.value)

    def test_unsupported_python_type(self):
        class Address:
            pass
        with pytest.raises(UnsupportedFieldType, match="Address"):
            build_context(_model(("home", Address)), GeneratorOptions())

    def test_duplicate_field(self):
        with pytest.raises(ModelDefinitionError, match="duplicate"):
            build_context(_model(("name", "String"), ("name", "Int")), GeneratorOptions())

    def test_column_collision(self):
        model = _model(("userId", "Int"), ("user_id", "Int"))
        with pytest.raises(ModelDefinitionError, match="user_id"):
            build_context(model, GeneratorOptions(auto_id_and_date_fields=False))

    def test_column_collision_allowed_without_snake_case(self):
        model = _model(("userId", "Int"), ("user_id", "Int"))
        options = GeneratorOptions(auto_snake_case_names=False, auto_id_and_date_fields=False)
        assert len(build_context(model, options)["where"]["builders"]) == 2

    def test_invalid_identifier(self):
        with pytest.raises(ModelDefinitionError):
            build_context(_model(("first name", "String")), GeneratorOptions())

    def test_keyword(self):
        with pytest.raises(ModelDefinitionError):
            build_context(_model(("class", "String")), GeneratorOptions())

    def test_reserved_name(self):
        with pytest.raises(ModelDefinitionError, match="reserved"):
            build_context(_model(("compile", "String")), GeneratorOptions())

    def test_unknown_model_option(self):
        model = _model(("name", "String"), options={"auto_plural": True})
        with pytest.raises(ModelDefinitionError, match="auto_plural"):
            build_context(model, GeneratorOptions())


def test_debug_logging(caplog, user_model, plain_options):
    caplog.set_level(logging.DEBUG, logger="ormgen.context_builder")
    build_context(user_model, plain_options)
    assert "table users" in caplog.text
