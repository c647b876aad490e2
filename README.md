# tethra

A solver for the dynamics of a towed underwater cable. The cable is split into
50 nodes, and each node holds 10 state values: the velocities u, v and w, the
tension T, the shear forces Sn and Sb, the angles theta and phi, and two
curvatures. Each time step is solved by a damped Newton iteration on an
implicit box-scheme residual. The iteration takes half of the full Newton step
each time. It stops when the largest relative increment or the largest interior
residual drops below 1e-16, or after 1000 iterations.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Taking turns with a flow solver

The solver shares a small control file with a flow solver so that the two take
turns. The file holds two native-endian 32-bit integers, the flow solver's turn
flag and this solver's turn flag. A 1024-byte data field follows them.

Create the control file, or resize an existing one, and give the first turn to
the flow solver. The path is optional and defaults to
`ControlDirect_SharedMemory` in the current directory:

```
tethra-control-create [path]
```

Print both flags and the data field up to its first NUL byte. The path default
is the same:

```
tethra-control-show [path]
```

Run the solver loop:

```
tethra [--path PATH] [--start N] [--poll SECONDS] [--steps N]
```

The loop polls the control file every `--poll` seconds (default 0.01) until this
solver's flag is non-zero. It then runs time step `N`, counting up from
`--start` (default 2000), and writes the results. Last, it sets the flow
solver's flag to 1 and its own flag to 0. Without `--steps` the loop runs until
it is interrupted. The default control file is
`../../../HydroSimulation/ControlDirect_SharedMemory`.

## Input and output files

`tethra.readout.FiberPaths` holds the location of every file, and
`tethra.readout.FiberIO` reads and writes them. The default paths are relative
to the working directory.

| Field | Default | Content |
|---|---|---|
| `top_vel` | `../bin/csv/TopVel.csv` | top-end velocity; row `k` is used for step `k` |
| `water` | `../bin/csv/Water.csv` | current velocity; row `k` is used for step `k` |
| `physical` | `../bin/csv/Parameters.csv` | second row: A, rho, d0, E, I, M, ma, Cdt, Cdn, Cdb, pi, g, Gx, Gy, ..., Gz (last value) |
| `delta` | `../bin/csv/Delta.csv` | second row: time step, arc-length step |
| `towed_object` | `../bin/csv/TowedObject.csv` | second row: six towed-body values |
| `velocity_relative`, `omega_relative`, `euler_angle` | `../../HydroSimulation/HydroData/*.csv` | the last three numbers on the last non-empty line of each file are used |
| `output` | `../bin/csv/output.csv` | state history, 10000 rows by 500 columns |
| `top_force`, `bottom_force` | `../../HydroSimulation/TethraForces/*.txt` | global force at each end, one line |

The bottom-end velocity is worked out from the towed body's relative velocity
and angular velocity at a towing point at (-0.0465, 0, 0), then rotated by its
Euler angles. Creating a `FiberIO` creates the `csv_dir` directory.

## Use from Python

```python
from tethra.readout import FiberIO, FiberPaths
from tethra.fiber import FiberMain

io = FiberIO(FiberPaths())
state = FiberMain(io).calculation(0)
```

Step 0 starts from the rest state given by `tethra.fiber.default_state`. A
later step `n` starts from row `n - 1` of the output file.

The building blocks can also be used on their own:

- `tethra.params.read_physical_data(io, index)` gathers a `PhysicalData`.
- `tethra.mnq` gives the `m_matrix`, `n_matrix` and `q_vector` terms.
- `tethra.fx.residual` gives the residual vector.
- `tethra.jacobian.jacobian` gives its Jacobian.
- `tethra.load.Load` bundles the residual and the Jacobian for one pair of states.
- `tethra.iterator.NewtonIterator` runs the iteration for one step.
- `tethra.boundary.apply_end_velocities` imposes the end velocities on a state.

## What this package does not do

It contains no flow solver. The towed body's velocity, angular velocity and
Euler angles must already be in the files listed above. The control file is
read and written through ordinary file access, not mapped into memory.