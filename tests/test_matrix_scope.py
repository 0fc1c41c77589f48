import logging
import numpy as np
import pytest

from imagelab.errors import InternalProcessingFailure, ResourceAllocationFailure
from imagelab.services.matrix_scope import MatrixHandle, MatrixScope


def test_every_handle_released_on_normal_exit(registry):
    with MatrixScope("test", registry) as scope:
        scope.adopt(np.zeros((2, 2), dtype=np.uint8), "a")
        scope.allocate((3, 3), np.uint8, "b")
        assert registry.live_count() == 2
        assert scope.live_handles == 2

    assert registry.live_count() == 0
    assert registry.total_acquired() == 2


def test_every_handle_released_when_the_block_raises(registry):
    with pytest.raises(RuntimeError):
        with MatrixScope("test", registry) as scope:
            scope.allocate((4, 4))
            scope.allocate((4, 4))
            raise RuntimeError("step failed")

    assert registry.live_count() == 0


def test_early_release_is_not_repeated_on_exit(registry):
    with MatrixScope("test", registry) as scope:
        mat = scope.allocate((2, 2))
        scope.release(mat)
        assert registry.live_count() == 0
        scope.release(mat)

    assert registry.live_count() == 0
    assert registry.total_acquired() == 1


def test_adopting_the_same_array_twice_registers_it_once(registry):
    with MatrixScope("test", registry) as scope:
        mat = np.ones((2, 2), dtype=np.uint8)
        scope.adopt(mat)
        scope.adopt(mat)
        assert registry.live_count() == 1


def test_adopt_rejects_missing_matrix(registry):
    with MatrixScope("test", registry) as scope:
        with pytest.raises(ResourceAllocationFailure):
            scope.adopt(None, "resize")


def test_handle_double_release_is_an_error(registry):
    handle = MatrixHandle(np.zeros(1), registry, "h")
    handle.release()
    with pytest.raises(InternalProcessingFailure):
        handle.release()
    with pytest.raises(InternalProcessingFailure):
        handle.mat
    assert registry.live_count() == 0


def test_detach_transfers_ownership(registry):
    with MatrixScope("test", registry) as scope:
        mat = scope.allocate((2, 2))
        assert scope.owns(mat)
        detached = scope.detach(mat)
        assert detached is mat
        assert not scope.owns(mat)
        assert registry.live_count() == 0

    assert registry.live_count() == 0
    assert detached.shape == (2, 2)


def test_detach_copies_arrays_the_scope_does_not_own(registry):
    caller_owned = np.arange(4, dtype=np.uint8)
    with MatrixScope("test", registry) as scope:
        detached = scope.detach(caller_owned)

    assert detached is not caller_owned
    assert np.array_equal(detached, caller_owned)


def test_closed_scope_refuses_new_matrices(registry):
    scope = MatrixScope("test", registry)
    scope.close()
    with pytest.raises(InternalProcessingFailure):
        scope.allocate((1, 1))


def test_impossible_allocation_is_reported(registry):
    with MatrixScope("test", registry) as scope:
        with pytest.raises(ResourceAllocationFailure):
            scope.allocate((1 << 40, 1 << 40), np.uint8, "huge")
    assert registry.live_count() == 0


def test_release_failure_is_logged_and_cleanup_continues(registry, caplog):
    class ExplodingHandle(MatrixHandle):
        def release(self):
            raise RuntimeError("boom")

    with caplog.at_level(logging.CRITICAL, logger="imagelab.services.matrix_scope"):
        with MatrixScope("test", registry) as scope:
            scope._handles.append(ExplodingHandle(np.zeros(1), registry, "bad"))
            scope.allocate((2, 2), label="good")

    assert registry.live_count() == 1  # only the exploding handle
    assert any("bad" in record.getMessage() for record in caplog.records)
