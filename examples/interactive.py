"""Open the interactive viewer on a pair of boxes; press h for the keys."""

from imagespace import FrustumDistortionEngine, make_box, render_mpl_interactive


def main():
    engine = FrustumDistortionEngine()
    scene = make_box(name="large", colour="#e00000")
    scene.add(make_box(0.4, name="small", colour="#2060e0", position=(0.6, 0.6, 0.6)))
    style = render_mpl_interactive(engine, [scene])
    print(f"Final observer position: {style.real_world_eye}")


if __name__ == "__main__":
    main()
