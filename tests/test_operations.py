"""Tests for the operation base types, registry and built-in operations."""

import pytest

from resource_prober.core.types import OperationKind, Outcome
from resource_prober.dataset import DatasetGenerator, create_sink
from resource_prober.operations import OPERATION_REGISTRY, Operation, OperationRegistry, OperationResult
from resource_prober.operations.base import describe_error
from resource_prober.operations.builtin import aggregate_frame


@pytest.fixture
def dataset():
    return DatasetGenerator().generate(120, seed=11)


class TestOperationResult:
    """Test the tagged result type."""

    def test_success(self):
        result = OperationResult.success(byte_size=10, rows=3)

        assert result.succeeded
        assert result.outcome is Outcome.SUCCESS
        assert result.byte_size == 10
        assert result.details == {"rows": 3}

    def test_failure(self):
        error = RuntimeError("disk full")
        result = OperationResult.failure("RuntimeError: disk full", exception=error)

        assert not result.succeeded
        assert result.error == "RuntimeError: disk full"
        assert result.exception is error

    def test_describe_error(self):
        assert describe_error(MemoryError()) == "MemoryError"
        assert describe_error(ValueError("bad")) == "ValueError: bad"


class TestOperationRun:
    """Test that exceptions never cross the operation boundary."""

    def test_exception_becomes_failure(self, dataset, csv_context):
        class Exploding(Operation):
            name = "exploding"

            def execute(self, dataset, context):
                raise MemoryError("cannot allocate")

        result = Exploding().run(dataset, csv_context)

        assert not result.succeeded
        assert result.error == "MemoryError: cannot allocate"
        assert isinstance(result.exception, MemoryError)

    def test_wrong_return_type_becomes_failure(self, dataset, csv_context):
        class Sloppy(Operation):
            name = "sloppy"

            def execute(self, dataset, context):
                return True

        result = Sloppy().run(dataset, csv_context)

        assert not result.succeeded
        assert "expected OperationResult" in result.error


class TestOperationRegistry:
    """Test operation registration and lookup."""

    def test_builtins_registered(self):
        for kind in OperationKind:
            assert OPERATION_REGISTRY.is_registered(kind.value)

    def test_register_as_decorator(self):
        registry = OperationRegistry()

        @registry.register
        class Noop(Operation):
            name = "noop"

            def execute(self, dataset, context):
                return OperationResult.success()

        assert registry.list_available() == ["noop"]
        assert isinstance(registry.create("noop"), Noop)

    def test_duplicate_name_rejected(self):
        registry = OperationRegistry()

        class First(Operation):
            name = "dup"

        class Second(Operation):
            name = "dup"

        registry.register(First)
        registry.register(First)
        with pytest.raises(ValueError, match="already registered"):
            registry.register(Second)

    def test_invalid_registrations(self):
        registry = OperationRegistry()

        class Unnamed(Operation):
            pass

        with pytest.raises(ValueError):
            registry.register(Unnamed)
        with pytest.raises(TypeError):
            registry.register(dict)
        with pytest.raises(TypeError):
            registry.register(Unnamed())

    def test_unknown_name_suggests(self):
        with pytest.raises(ValueError, match="Did you mean: write"):
            OPERATION_REGISTRY.get("wirte")


class TestBuiltinOperations:
    """Test generate / write / read / aggregate / parallel."""

    def test_generate(self, dataset, csv_context):
        result = OPERATION_REGISTRY.create("generate").run(dataset, csv_context)

        assert result.succeeded
        assert result.byte_size is None
        assert result.details == {"rows": 120, "columns": 20}

    def test_write_reports_file_size_and_cleans_up(self, dataset, csv_context, tmp_path):
        result = OPERATION_REGISTRY.create("write").run(dataset, csv_context)

        assert result.succeeded
        assert result.byte_size > 0
        assert result.byte_size == result.details["file_size"]
        assert list(tmp_path.iterdir()) == []

    def test_write_keeps_files(self, dataset, csv_context, tmp_path):
        csv_context.keep_files = True

        OPERATION_REGISTRY.create("write").run(dataset, csv_context)

        assert (tmp_path / "probe_write_0.csv").exists()

    def test_read(self, dataset, csv_context):
        result = OPERATION_REGISTRY.create("read").run(dataset, csv_context)

        assert result.succeeded
        assert result.details["file_size"] == result.byte_size
        assert result.details["read_seconds"] >= 0

    def test_aggregate(self, dataset, csv_context):
        result = OPERATION_REGISTRY.create("aggregate").run(dataset, csv_context)
        expected = aggregate_frame(dataset)

        assert result.succeeded
        assert result.details["groups"] == len(expected["groups"])
        assert result.details["filtered_rows"] == len(expected["filtered"])

    def test_aggregate_frame(self, dataset):
        results = aggregate_frame(dataset)

        assert results["groups"]["count"].sum() == len(dataset)
        assert (results["filtered"]["value1"] > 100).all()
        assert (results["filtered"]["status"] == "active").all()
        assert results["sorted"]["value1"].is_monotonic_decreasing

    @pytest.mark.parametrize("format_name", ["csv", "parquet"])
    def test_parallel(self, dataset, csv_context, format_name):
        csv_context.sink = create_sink(format_name)

        result = OPERATION_REGISTRY.create("parallel").run(dataset, csv_context)

        assert result.succeeded, result.error
        assert result.details["workers"] == 3
        assert result.details["chunks"] == 3
