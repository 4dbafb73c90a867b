"""pygame host: window, keyboard and framebuffer presentation."""

import numpy as np
import pygame

from chix8.constants import SCREEN_WIDTH, SCREEN_HEIGHT
from chix8.driver import DriverState, ExecutionDriver
from chix8.keypad import KEY_LAYOUT
from chix8.rendering import create_color_scheme

# Keypad assignment on the left-hand QWERTY block
KEY_MAP = {getattr(pygame, f"K_{name}"): key for name, key in KEY_LAYOUT.items()}


class PygameFrontend:
    """Presents a driver's framebuffer in a window and feeds it keyboard input."""

    def __init__(self, driver: ExecutionDriver, scale: int = 10, color_scheme: str = "white",
                 title: str = "CHIP-8"):
        self.driver = driver
        self.scale = scale
        self.on_color, self.off_color = create_color_scheme(color_scheme)

        pygame.init()
        self.screen = pygame.display.set_mode((SCREEN_WIDTH * scale, SCREEN_HEIGHT * scale))
        pygame.display.set_caption(title)
        driver.present = self.present

    def poll(self):
        """Forward pending window and keyboard events to the driver."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.driver.request_stop()
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.driver.request_stop()
                elif event.key in KEY_MAP:
                    self.driver.submit_key(KEY_MAP[event.key], True)
            elif event.type == pygame.KEYUP:
                if event.key in KEY_MAP:
                    self.driver.submit_key(KEY_MAP[event.key], False)

    def present(self, framebuffer: np.ndarray):
        """Draw every set cell as a filled block on a cleared background."""
        self.screen.fill(self.off_color)
        for x, y in np.argwhere(framebuffer):
            rect = pygame.Rect(x * self.scale, y * self.scale, self.scale, self.scale)
            pygame.draw.rect(self.screen, self.on_color, rect)
        pygame.display.flip()

    def run(self) -> DriverState:
        """Run the driver until the window closes or the machine halts."""
        self.present(self.driver.framebuffer())
        try:
            return self.driver.run(poll=self.poll)
        finally:
            pygame.quit()
