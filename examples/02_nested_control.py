"""
02: Nested logging

A plant and a controller, each @loggable. The plant calls the controller via
nested_log so the controller's record lands under "ctrl" while its return
value feeds straight into the dynamics. Nothing is computed twice.

Run: python examples/02_nested_control.py
"""

from __future__ import annotations

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from simlogger import collect, log, loggable, nested_log, nested_onlylog


@loggable
def controller(x, gain):
    error = log(error=0.0 - x)
    return log(u=gain * error)


@loggable
def diagnostics(x, u):
    log(power=x * u)


@loggable
def plant(x, t, gain=2.0):
    log("t")
    u = nested_log("ctrl", controller, x, gain)
    nested_onlylog("diag", diagnostics, x, u)
    return log(dx=u - 0.1 * x)


def main() -> None:
    dt = 0.05
    x = 1.0
    trajectory = {}
    for i in range(41):
        t = i * dt
        trajectory[t] = x
        x += dt * plant(x, t)

    saved = collect(plant, list(trajectory)[::10], lambda t: ((trajectory[t], t), {}))
    for t, u, power in zip(saved.t, saved.series("ctrl.u"), saved.series("diag.power")):
        print(f"  t={t:4.2f}  u={u:+.4f}  power={power:+.4f}")


if __name__ == "__main__":
    main()
