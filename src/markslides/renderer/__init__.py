"""Renderer package."""

from .base import BaseRenderer, Renderer, render_element, render_presentation, render_slide
from .html_renderer import HTMLRenderer

__all__ = [
    "BaseRenderer",
    "HTMLRenderer",
    "Renderer",
    "render_element",
    "render_presentation",
    "render_slide",
]
