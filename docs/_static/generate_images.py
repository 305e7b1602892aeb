"""Generate static images for the documentation."""

from pathlib import Path

from imagespace import (
    FrustumDistortionEngine,
    FrustumSettings,
    ManualClock,
    make_box,
    render_mpl,
)

OUT = Path(__file__).resolve().parent


def engine_at(fraction: float, **settings) -> FrustumDistortionEngine:
    """An engine whose transition to image space is *fraction* complete."""
    clock = ManualClock()
    engine = FrustumDistortionEngine(FrustumSettings(**settings), clock=clock)
    engine.activate_transition()
    clock.advance(fraction * engine.settings.transition_duration)
    engine.tick()
    return engine


def main() -> None:
    box = make_box(name="cube")

    # Perspective transition -- hero sequence
    for fraction in (0.0, 0.5, 1.0):
        path = OUT / f"perspective_{int(fraction * 100):03d}.svg"
        render_mpl(engine_at(fraction), [box], path, figsize=(8, 4), dpi=150)
        print(f"  wrote {path}")

    # Orthographic frusta only change depth scale
    path = OUT / "orthographic_100.svg"
    render_mpl(
        engine_at(1.0, projection="orthographic"), [box], path,
        figsize=(8, 4), dpi=150,
    )
    print(f"  wrote {path}")

    # Near plane held fixed: the transition only squashes depth
    path = OUT / "keep_near_constant_050.svg"
    render_mpl(
        engine_at(0.5, distort_mode="keep_near_constant"), [box], path,
        figsize=(8, 4), dpi=150, show_axes=True,
    )
    print(f"  wrote {path}")


if __name__ == "__main__":
    main()
