"""
01: Logging a dynamics function

The basics: @loggable gives one step function two entry points. The Euler
loop calls the plain form to advance the state; the saving callback calls the
recording form at each sample point and keeps the Records.

Run: python examples/01_dynamics.py
"""

from __future__ import annotations

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from simlogger import SavedValues, loggable, log, onlylog, saving_callback


@loggable
def dynamics(dx, x, p, t):
    log("x")
    u = log(u=[-xi for xi in x])
    onlylog(state=lambda: list(x))
    onlylog(input=lambda: u)
    dx[:] = u


def main() -> None:
    t0, tf, dt = 0.0, 10.0, 0.01
    x = [1.0, 2.0, 3.0]

    saved = SavedValues()
    # the solver mutates x in place, so hand the recording form a copy
    log_func = saving_callback(
        dynamics,
        saved,
        args=lambda x, t: (([0.0] * len(x), list(x), None, t), {}),
    )

    steps = int(round((tf - t0) / dt))
    for i in range(steps + 1):
        t = t0 + i * dt
        log_func(x, t)
        dx = [0.0] * len(x)
        dynamics(dx, x, None, t)
        x = [xi + dt * dxi for xi, dxi in zip(x, dx)]

    states = saved.series("state")
    inputs = saved.series("input")
    print(f"  samples: {len(saved)}")
    for t, state, u in list(zip(saved.t, states, inputs))[::200]:
        print(f"  t={t:5.2f}  x={[round(v, 4) for v in state]}  u={[round(v, 4) for v in u]}")


if __name__ == "__main__":
    main()
