"""Command-line entry point that opens the game window and runs the frame loop."""

from __future__ import annotations

import argparse
import sys
import time

from starfighter.resources import ModelLoadError
from starfighter.scene import (
    CONTROL_ESCAPE,
    CONTROL_FASTER,
    CONTROL_FIRE,
    CONTROL_ROLL_LEFT,
    CONTROL_ROLL_RIGHT,
    CONTROL_SLOWER,
    SceneError,
    SceneManager,
)
from starfighter.scenes import GameScene, MenuScene
from starfighter.shader import ShaderError

SCREEN_WIDTH = 1920
SCREEN_HEIGHT = 1080
FRAME_INTERVAL = 1.0 / 60.0


def _held_controls(keys, buttons, key, mouse) -> set[str]:
    bindings = {
        key.ESCAPE: CONTROL_ESCAPE,
        key.W: CONTROL_FASTER,
        key.S: CONTROL_SLOWER,
        key.A: CONTROL_ROLL_LEFT,
        key.D: CONTROL_ROLL_RIGHT,
    }
    held = {control for symbol, control in bindings.items() if keys[symbol]}
    if buttons[mouse.LEFT]:
        held.add(CONTROL_FIRE)
    return held


def _run(scene, window):
    import pyglet
    from pyglet.window import key, mouse

    keys = key.KeyStateHandler()
    buttons = mouse.MouseStateHandler()
    window.push_handlers(keys, buttons)

    pointer_x, pointer_y = scene.last_x, scene.last_y

    def on_pointer(dx, dy):
        nonlocal pointer_x, pointer_y
        pointer_x += dx
        pointer_y -= dy  # pyglet's y grows upwards
        scene.handle_mouse(pointer_x, pointer_y)

    def on_mouse_motion(x, y, dx, dy):
        on_pointer(dx, dy)

    def on_mouse_drag(x, y, dx, dy, pressed, modifiers):
        on_pointer(dx, dy)

    def on_resize(width, height):
        scene.on_resize(*window.get_framebuffer_size())
        return pyglet.event.EVENT_HANDLED

    window.push_handlers(on_mouse_motion=on_mouse_motion, on_mouse_drag=on_mouse_drag, on_resize=on_resize)

    start = time.perf_counter()
    last_frame_time = 0.0
    while not scene.should_close and not window.has_exit:
        now = time.perf_counter() - start
        window.dispatch_events()
        scene.handle_input(_held_controls(keys, buttons, key, mouse))
        scene.update()
        if now - last_frame_time >= FRAME_INTERVAL:
            window.switch_to()
            scene.render()
            window.flip()
            last_frame_time = now


def main(argv=None):
    """Run the game; returns 0 on a normal exit and -1 when loading fails."""
    parser = argparse.ArgumentParser(prog="starfighter", description="Fly a ship and shoot down enemy ships.")
    parser.add_argument("--menu", action="store_true", help="show the main-menu scene instead of the game")
    args = parser.parse_args(argv)

    manager = SceneManager.get()
    try:
        scene_type = MenuScene if args.menu else GameScene
        scene = scene_type(SCREEN_WIDTH, SCREEN_HEIGHT)
        manager.set_scene(scene)
        window = scene.window
    except (SceneError, ModelLoadError, ShaderError) as exc:
        print(f"starfighter: {exc}", file=sys.stderr)
        return -1

    try:
        _run(manager.current_scene, window)
    except ShaderError as exc:
        print(f"starfighter: {exc}", file=sys.stderr)
        return -1
    finally:
        scene.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())