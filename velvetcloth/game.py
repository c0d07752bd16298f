"""The game loop: actors, callbacks, shared state and fixed-step updates."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

import numpy as np

from velvetcloth.actor import Actor, Component
from velvetcloth.input import KEY_1, KEY_ESCAPE, KEY_H, KEY_O, KEY_R, Input
from velvetcloth.timer import Timer

logger = logging.getLogger(__name__)

CAMERA_TRANSLATE_SPEED = 5.0
CAMERA_ROTATE_SENSITIVITY = 0.15
SCREEN_WIDTH = 1600
SCREEN_HEIGHT = 900
SHADOW_WIDTH = 1024
SHADOW_HEIGHT = 1024


class Callback:
    """An ordered list of functions invoked together."""

    def __init__(self) -> None:
        self._funcs: list[Callable] = []

    def register(self, func: Callable) -> Callable:
        self._funcs.append(func)
        return func

    def invoke(self, *args) -> None:
        for func in list(self._funcs):
            func(*args)

    def clear(self) -> None:
        self._funcs.clear()

    def __len__(self) -> int:
        return len(self._funcs)


@dataclass
class GameState:
    """Flags shared between the loop, the input handlers and the interface."""

    pause: bool = False
    step: bool = False
    draw_particles: bool = False
    render_wireframe: bool = False
    hide_gui: bool = False
    detail_timer: bool = False


class GameInstance:
    """Owns the actors and drives their per-frame and fixed-step updates."""

    def __init__(
        self,
        timer: Timer | None = None,
        inputs: Input | None = None,
        game_state: GameState | None = None,
        switch_scene: Callable[[int], None] | None = None,
        reset: Callable[[], None] | None = None,
    ) -> None:
        self.timer = timer if timer is not None else Timer()
        self.inputs = inputs
        self.game_state = game_state if game_state is not None else GameState()
        self._switch_scene = switch_scene
        self._reset = reset

        self.on_mouse_scroll = Callback()
        self.on_mouse_move = Callback()
        self.animation_update = Callback()
        self.god_update = Callback()
        self.on_finalize = Callback()
        self.on_gui = Callback()
        self.on_render = Callback()

        self.pending_reset = False
        self.close_requested = False
        self.sky_color = np.zeros(4)
        self._actors: list[Actor] = []

        self.timer.start_timer("GAME_INSTANCE_INIT")

    @property
    def actors(self) -> tuple[Actor, ...]:
        return tuple(self._actors)

    def add_actor(self, actor: Actor) -> Actor:
        self._actors.append(actor)
        return actor

    def create_actor(self, name: str) -> Actor:
        return self.add_actor(Actor(name))

    def find_components(self, cls: type) -> list[Component]:
        """Every component of type ``cls`` across all actors, in actor order."""
        return [c for actor in self._actors for c in actor.get_components(cls)]

    def process_keyboard(self) -> None:
        """Handle global shortcuts: hide GUI, quit, single step, scene switch, reset."""
        inputs = self.inputs
        if inputs is None:
            return
        state = self.game_state
        state.hide_gui = inputs.toggle_on_key_down(KEY_H, state.hide_gui)

        if inputs.get_key(KEY_ESCAPE):
            self.close_requested = True
        if inputs.get_key_down(KEY_O):
            state.step = True
            state.pause = False
        for index in range(9):
            if inputs.get_key_down(KEY_1 + index) and self._switch_scene is not None:
                self._switch_scene(index)
        if inputs.get_key_down(KEY_R) and self._reset is not None:
            self._reset()

    def initialize(self) -> None:
        for actor in self._actors:
            actor.start()

    def step(self) -> None:
        """Run one frame of the main loop."""
        state = self.game_state
        timer = self.timer
        self.process_keyboard()

        timer.start_timer("CPU_TIME")
        timer.update_delta_time()

        if not state.hide_gui:
            self.on_gui.invoke()

        if not state.pause:
            timer.next_frame()
            if timer.next_fixed_frame():
                for actor in self._actors:
                    actor.fixed_update()
                self.animation_update.invoke()
                if state.step:
                    state.pause = True
                    state.step = False
            for actor in self._actors:
                actor.update()

        if self.inputs is not None:
            self.inputs.on_update()

        self.god_update.invoke()
        timer.end_timer("CPU_TIME")

        self.on_render.invoke()

    def run(self, should_close: Callable[[], bool] | None = None) -> int:
        """Start actors, loop until closed or reset is pending, then finalize."""
        self.initialize()
        init_time = self.timer.end_timer("GAME_INSTANCE_INIT") * 1000
        logger.info("Initialization success within %.2f ms. Enter main loop.", init_time)
        while not self.close_requested and not self.pending_reset:
            if should_close is not None and should_close():
                break
            self.step()
        self.finalize()
        return 0

    def finalize(self) -> None:
        for actor in self._actors:
            actor.on_destroy()