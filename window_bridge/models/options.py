"""Creation option models for browser windows and views.

Options are Pydantic models with snake_case attributes and camelCase wire
names. Two payload shapes exist:

- sparse: only fields the caller set explicitly, so the host applies its
  own defaults to everything else (used for auto-placed windows)
- full: every field with its default value filled in (used for windows with
  an explicit position, and for views)

`None` values are never sent in either shape.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..constants import UNSET_POSITION


_COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


class TitleBarStyle(str, Enum):
    """Title bar styles supported by the host (macOS only)."""
    DEFAULT = "default"
    HIDDEN = "hidden"
    HIDDEN_INSET = "hiddenInset"
    CUSTOM_BUTTONS_ON_HOVER = "customButtonsOnHover"


class _WireModel(BaseModel):
    """Base for models that cross the process boundary."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        use_enum_values=True,
    )

    def to_payload(self, include_defaults: bool = True) -> Dict[str, Any]:
        """Serialize to the camelCase dict sent over the channel.

        Args:
            include_defaults: Fill in fields the caller never set. When
                False, only explicitly set fields are emitted, even when
                their value equals the model default.

        Returns:
            JSON-compatible dict with `None` values omitted
        """
        data = self.model_dump(
            mode="json",
            by_alias=True,
            exclude_none=True,
            exclude_unset=not include_defaults,
        )
        if not include_defaults:
            # A nested block set with no fields of its own dumps as {}
            data = {key: value for key, value in data.items() if value != {}}
        return data


class WebPreferences(_WireModel):
    """Web page settings shared by windows and views."""

    dev_tools: bool = Field(default=True, description="Allow opening developer tools")
    node_integration: bool = Field(default=True, description="Expose Node.js to page scripts")
    node_integration_in_worker: bool = False
    preload: Optional[str] = Field(default=None, description="Script loaded before other scripts")
    sandbox: bool = False
    partition: Optional[str] = Field(default=None, description="Session partition name")
    zoom_factor: float = Field(default=1.0, gt=0)
    javascript: bool = True
    web_security: bool = True
    allow_running_insecure_content: bool = False
    images: bool = True
    text_areas_are_resizable: bool = True
    webgl: bool = True
    plugins: bool = False
    experimental_features: bool = False
    scroll_bounce: bool = False
    default_font_size: int = Field(default=16, ge=1)
    default_monospace_font_size: int = Field(default=13, ge=1)
    minimum_font_size: int = Field(default=0, ge=0)
    default_encoding: str = "ISO-8859-1"
    background_throttling: bool = True
    offscreen: bool = False
    context_isolation: bool = False
    webview_tag: bool = False

    @field_validator("partition")
    @classmethod
    def validate_partition(cls, v: Optional[str]) -> Optional[str]:
        """Partition names must be non-blank; `persist:` prefix is allowed."""
        if v is not None and not v.strip():
            raise ValueError("partition must not be blank")
        return v


class BrowserWindowOptions(_WireModel):
    """Options for creating a browser window.

    `x` and `y` default to the unset sentinel (-1), which is distinct from
    the legitimate coordinate 0. A window whose position is left unset is
    placed by the host.
    """

    width: int = Field(default=800, ge=0, description="Window width in pixels")
    height: int = Field(default=600, ge=0, description="Window height in pixels")
    x: int = Field(default=UNSET_POSITION, description="Left offset from screen (-1 = unset)")
    y: int = Field(default=UNSET_POSITION, description="Top offset from screen (-1 = unset)")
    use_content_size: bool = False
    center: bool = False
    min_width: int = Field(default=0, ge=0)
    min_height: int = Field(default=0, ge=0)
    max_width: Optional[int] = Field(default=None, ge=0)
    max_height: Optional[int] = Field(default=None, ge=0)
    resizable: bool = True
    movable: bool = True
    minimizable: bool = True
    maximizable: bool = True
    closable: bool = True
    focusable: bool = True
    always_on_top: bool = False
    fullscreen: bool = False
    fullscreenable: bool = True
    skip_taskbar: bool = False
    kiosk: bool = False
    title: Optional[str] = None
    icon: Optional[str] = None
    show: bool = True
    frame: bool = True
    modal: bool = False
    accept_first_mouse: bool = False
    disable_auto_hide_cursor: bool = False
    auto_hide_menu_bar: bool = False
    enable_larger_than_screen: bool = False
    background_color: Optional[str] = None
    has_shadow: bool = True
    opacity: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    dark_theme: bool = False
    transparent: bool = False
    type: Optional[str] = None
    title_bar_style: Optional[TitleBarStyle] = None
    thick_frame: bool = True
    vibrancy: Optional[str] = None
    zoom_to_page_width: bool = False
    tabbing_identifier: Optional[str] = None
    proxy: Optional[str] = None
    proxy_credentials: Optional[str] = None
    web_preferences: WebPreferences = Field(default_factory=WebPreferences)

    @field_validator("background_color")
    @classmethod
    def validate_background_color(cls, v: Optional[str]) -> Optional[str]:
        """Accept #RGB, #RRGGBB and #AARRGGBB hex colors."""
        if v is not None and not _COLOR_PATTERN.match(v):
            raise ValueError(f"background_color must be a hex color like #RRGGBB, got: {v}")
        return v

    @property
    def has_explicit_position(self) -> bool:
        """True unless both coordinates are left at the unset sentinel."""
        return not (self.x == UNSET_POSITION and self.y == UNSET_POSITION)

    def to_creation_payload(self) -> Dict[str, Any]:
        """Build the payload for a window creation command.

        Without an explicit position the payload is sparse and carries no
        coordinates at all, so the host's own placement algorithm runs.
        With an explicit position every field is spelled out.
        """
        if not self.has_explicit_position:
            payload = self.to_payload(include_defaults=False)
            payload.pop("x", None)
            payload.pop("y", None)
            return payload
        return self.to_payload(include_defaults=True)


class BrowserViewOptions(_WireModel):
    """Options for creating a browser view."""

    web_preferences: WebPreferences = Field(default_factory=WebPreferences)
    proxy: Optional[str] = Field(default=None, description="Proxy rules for the view session")
    proxy_credentials: Optional[str] = None

    def to_creation_payload(self) -> Dict[str, Any]:
        """Views are always created from the full payload."""
        return self.to_payload(include_defaults=True)
