import pytest

from face_fixtures import make_calibration_data, make_face_landmarks


@pytest.fixture
def face_landmarks():
    return make_face_landmarks()


@pytest.fixture
def calibration_data():
    return make_calibration_data()
