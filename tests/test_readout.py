import numpy as np
import pytest

from tethra.readout import (
    FiberIO,
    FiberPaths,
    body_to_global_force,
    read_last_line_data,
    rotation_matrix,
)


@pytest.fixture
def paths(tmp_path):
    csv = tmp_path / "csv"
    hydro = tmp_path / "hydro"
    hydro.mkdir()
    return FiberPaths(
        csv_dir=csv,
        top_vel=csv / "TopVel.csv",
        towed_object=csv / "TowedObject.csv",
        water=csv / "Water.csv",
        physical=csv / "Parameters.csv",
        delta=csv / "Delta.csv",
        output=csv / "output.csv",
        velocity_relative=hydro / "VelocityRelative.csv",
        omega_relative=hydro / "omegaRelative.csv",
        euler_angle=hydro / "EulerAngle.csv",
        top_force=hydro / "topforce.txt",
        bottom_force=hydro / "bottomforce.txt",
    )


@pytest.fixture
def fio(paths):
    return FiberIO(paths)


def test_init_creates_csv_directory(paths, fio):
    assert paths.csv_dir.is_dir()


def test_read_top_vel_selects_row(paths, fio):
    paths.top_vel.write_text("1,2,3\n4.5,5,6\n")
    assert fio.read_top_vel(0) == [1.0, 2.0, 3.0]
    assert fio.read_top_vel(1) == [4.5, 5.0, 6.0]


def test_lenient_fields(paths, fio):
    paths.physical.write_text("h\n1.5abc,,x,7\n")
    assert fio.read_physical() == [1.5, 0.0, 0.0, 7.0]


def test_trailing_comma_is_not_a_field(paths, fio):
    paths.delta.write_text("h\n1,2,\n")
    assert fio.read_delta() == [1.0, 2.0]


def test_missing_row_raises(paths, fio):
    paths.towed_object.write_text("h\n")
    with pytest.raises(IndexError):
        fio.read_bottom_g()


def test_missing_file_raises(fio):
    with pytest.raises(FileNotFoundError):
        fio.read_water(0)


def test_read_last_line_data(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("a,b,c\n1,2,x,3,4,5\n\n")
    assert read_last_line_data(path) == [3.0, 4.0, 5.0]
    path.write_text("1,2\n")
    assert read_last_line_data(path) == [1.0, 2.0]
    assert read_last_line_data(tmp_path / "missing.csv") == []


def test_rotation_matrix_identity_and_orthogonal():
    assert np.allclose(rotation_matrix((0.0, 0.0, 0.0)), np.eye(3))
    r = rotation_matrix((0.3, -1.1, 2.4))
    assert np.allclose(r @ r.T, np.eye(3))
    assert np.isclose(np.linalg.det(r), 1.0)


def test_rotation_matrix_order():
    a, b, c = 0.4, -0.7, 1.3
    composed = (
        rotation_matrix((a, 0.0, 0.0))
        @ rotation_matrix((0.0, b, 0.0))
        @ rotation_matrix((0.0, 0.0, c))
    )
    assert np.allclose(rotation_matrix((a, b, c)), composed)


def test_rotation_about_z():
    r = rotation_matrix((0.0, 0.0, np.pi / 2))
    assert np.allclose(r @ np.array([1.0, 0.0, 0.0]), [0.0, 1.0, 0.0])


def test_body_to_global_force():
    forces = [1.0, -2.0, 3.0]
    assert np.allclose(body_to_global_force(forces, 0.0, 0.0), forces)
    result = body_to_global_force(forces, 0.6, -1.2)
    assert np.isclose(np.linalg.norm(result), np.linalg.norm(forces))


def test_read_bottom_vel_plain(paths, fio):
    paths.velocity_relative.write_text("t,vx,vy,vz\n0,1,2,3\n")
    paths.omega_relative.write_text("0,0,0,0\n")
    paths.euler_angle.write_text("0,0,0,0\n")
    assert np.allclose(fio.read_bottom_vel(), [1.0, 2.0, 3.0])


def test_read_bottom_vel_rotation_term(paths, fio):
    paths.velocity_relative.write_text("0,1,2,3\n")
    paths.omega_relative.write_text("0,0,0,1\n")
    paths.euler_angle.write_text("0,0,0,0\n")
    assert np.allclose(fio.read_bottom_vel(), [1.0, 2.0 - 0.0465, 3.0])


def test_read_bottom_vel_rotated(paths, fio):
    paths.velocity_relative.write_text("0,1,2,3\n")
    paths.omega_relative.write_text("0,0,0,0\n")
    paths.euler_angle.write_text("0,0.2,0.5,-0.3\n")
    expected = rotation_matrix((0.2, 0.5, -0.3)) @ np.array([1.0, 2.0, 3.0])
    assert np.allclose(fio.read_bottom_vel(), expected)


def test_read_bottom_vel_missing_data(paths, fio):
    paths.velocity_relative.write_text("0,1,2,3\n")
    paths.omega_relative.write_text("0,0,0,0\n")
    with pytest.raises(ValueError):
        fio.read_bottom_vel()


def test_output_pads_and_reads_back(paths, fio):
    matrix = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
    fio.output(matrix, 3, 4)
    lines = paths.output.read_text().splitlines()
    assert lines[0] == "1,2,3,0"
    assert len(lines) == 3
    read = fio.read_csv(3)
    expected = np.zeros((3, 4))
    expected[:2, :3] = matrix
    assert np.array_equal(read, expected)
    assert fio.read_csv(2).shape == (2, 4)


def test_output_truncates(paths, fio):
    fio.output(np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]]), 1, 2)
    assert paths.output.read_text() == "1,2\n"


def test_output_precision_round_trip(fio):
    fio.output(np.array([[1.23456789]]), 1, 1)
    assert fio.read_csv(1)[0, 0] == pytest.approx(1.23456789, rel=1e-5)


def test_read_csv_empty_raises(paths, fio):
    paths.output.write_text("")
    with pytest.raises(ValueError):
        fio.read_csv(5)


def test_read_last_row(paths, fio):
    matrix = np.arange(1000.0).reshape(2, 500)
    fio.output(matrix, 2, 500)
    assert np.array_equal(fio.read_last_row(1), matrix[1])
    with pytest.raises(IndexError):
        fio.read_last_row(2)


def test_read_last_row_pads(paths, fio):
    paths.output.write_text("1,2\n")
    row = fio.read_last_row(0)
    assert row.shape == (500,)
    assert list(row[:2]) == [1.0, 2.0]
    assert not row[2:].any()


def test_out_top_force(paths, fio):
    v = np.zeros(500)
    v[3:6] = [1.0, 2.0, 3.0]
    v[6], v[7] = 0.3, -0.2
    fio.out_top_force(v)
    text = paths.top_force.read_text()
    assert not text.endswith("\n")
    values = [float(x) for x in text.split()]
    assert np.allclose(values, body_to_global_force([1.0, 2.0, 3.0], 0.3, -0.2), rtol=1e-5)


def test_out_bottom_force(paths, fio):
    v = np.zeros(500)
    v[493:496] = [4.0, -1.0, 2.0]
    v[496], v[497] = -0.5, 0.9
    fio.out_bottom_force(v)
    values = [float(x) for x in paths.bottom_force.read_text().split()]
    assert np.allclose(values, body_to_global_force([4.0, -1.0, 2.0], -0.5, 0.9), rtol=1e-5)


def test_read_last_value(tmp_path, fio):
    path = tmp_path / "values.txt"
    path.write_text("a b\ntime 3.5\n")
    assert fio.read_last_value(path) == 3.5
    path.write_text("2.25")
    assert fio.read_last_value(path) == 2.25


def test_read_last_value_errors(tmp_path, fio):
    path = tmp_path / "values.txt"
    path.write_text("x y\nno number\n")
    with pytest.raises(ValueError):
        fio.read_last_value(path)
    with pytest.raises(ValueError):
        fio.read_last_value(tmp_path / "missing.txt")