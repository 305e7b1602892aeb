"""Demo script: render a cube part-way through the transition to image space."""

import logging
from pathlib import Path

from imagespace import (
    FrustumDistortionEngine,
    FrustumSettings,
    ManualClock,
    make_box,
    render_mpl,
    setup_logging,
)

OUTPUT = Path(__file__).resolve().parent


def main():
    setup_logging(logging.DEBUG)

    clock = ManualClock()
    engine = FrustumDistortionEngine(FrustumSettings(fov_degrees=60.0), clock=clock)
    cube = make_box(name="cube", position=(0.0, 0.0, -5.0))
    print(f"Frustum: {engine.projection_kind.value}, near {engine.near}, far {engine.far}")

    engine.activate_transition()
    for step in range(5):
        path = OUTPUT / f"cube_{step}.png"
        render_mpl(engine, [cube], path)
        print(f"Rendered t={clock.now():.2f}s to {path}")
        clock.advance(engine.settings.transition_duration / 4)

    # Edits that would put near beyond far are refused.
    if not engine.set_near(engine.far + 1.0):
        print(f"Near plane unchanged at {engine.near}")


if __name__ == "__main__":
    main()
