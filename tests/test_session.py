from datetime import datetime

import numpy as np
import pytest

from imgpipe.pipeline import PipelineError
from imgpipe.session import DropTarget, Session, SessionError
from imgpipe.treatments import Treatment


@pytest.fixture
def image():
    rng = np.random.default_rng(7)
    return rng.integers(0, 256, size=(6, 8, 3), dtype=np.uint8)


@pytest.fixture
def session(image):
    s = Session()
    s.set_original(image)
    return s


def test_drop_without_image_is_refused():
    s = Session()
    with pytest.raises(SessionError):
        s.drop_treatment(Treatment.MIRROR.value)
    assert len(s.pipeline) == 0


def test_drop_appends_and_recomputes(session, image):
    session.drop_treatment(Treatment.MIRROR.value)
    assert len(session.stages) == 2
    np.testing.assert_array_equal(session.final_image, image[:, ::-1])
    assert session.labels == ["Original", Treatment.MIRROR.value]


def test_stage_zero_is_original(session, image):
    session.drop_treatment(Treatment.NEGATIVE.value)
    np.testing.assert_array_equal(session.stage_at(0), image)
    np.testing.assert_array_equal(session.stage_at(1), 255 - image)


def test_stage_at_out_of_range(session):
    with pytest.raises(IndexError):
        session.stage_at(1)


def test_remove_original_is_refused(session):
    session.drop_treatment(Treatment.MIRROR.value)
    with pytest.raises(PipelineError):
        session.remove_checked([0, 1])
    assert len(session.pipeline) == 1


def test_remove_checked_restores_original(session, image):
    session.drop_treatment(Treatment.MIRROR.value)
    assert session.remove_checked([1]) == 1
    assert len(session.pipeline) == 0
    np.testing.assert_array_equal(session.final_image, image)


def test_clear_empty_pipeline_raises(session):
    with pytest.raises(PipelineError):
        session.clear_pipeline()


def test_clear_pipeline(session, image):
    session.drop_treatment(Treatment.NEGATIVE.value)
    session.drop_treatment(Treatment.MIRROR.value)
    session.clear_pipeline()
    assert len(session.stages) == 1
    np.testing.assert_array_equal(session.final_image, image)


def test_empty_original_clears_stages(session):
    session.set_original(np.zeros((0, 0, 3), dtype=np.uint8))
    assert session.final_image is None
    assert session.labels == []


def test_save_image_without_image():
    with pytest.raises(SessionError):
        Session().save_image("out.png")


def test_save_and_load_image_round_trip(session, image, tmp_path):
    path = tmp_path / "out.png"
    session.save_image(path)
    other = Session()
    other.load_image(path)
    np.testing.assert_array_equal(other.original, image)


def test_load_missing_image(tmp_path):
    with pytest.raises(SessionError):
        Session().load_image(tmp_path / "missing.png")


def test_pipeline_file_round_trip(session, image, tmp_path):
    session.drop_treatment(Treatment.MIRROR.value)
    session.drop_treatment(Treatment.NEGATIVE.value)
    path = tmp_path / "pipeline.txt"
    session.save_pipeline(path, datetime(2025, 1, 2, 3, 4, 5))

    other = Session()
    other.set_original(image)
    parsed = other.load_pipeline(path)
    assert list(parsed.steps) == [Treatment.MIRROR.value, Treatment.NEGATIVE.value]
    np.testing.assert_array_equal(other.final_image, session.final_image)


def test_load_pipeline_requires_image(session, tmp_path):
    session.drop_treatment(Treatment.MIRROR.value)
    path = tmp_path / "pipeline.txt"
    session.save_pipeline(path)
    empty = Session()
    with pytest.raises(SessionError):
        empty.load_pipeline(path)
    assert len(empty.pipeline) == 0


def test_drop_target_without_session():
    assert DropTarget(None).on_drop_text(0, 0, Treatment.MIRROR.value) is False


def test_drop_target_applies(session):
    target = DropTarget(session)
    assert target.on_drop_text(3, 4, Treatment.GRAYSCALE.value) is True
    assert list(session.pipeline) == [Treatment.GRAYSCALE.value]