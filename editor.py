import base64
import logging
import mimetypes
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Union

import httpx

from routine import Routine
from storage import LocalStorage

logger = logging.getLogger(__name__)

STORAGE_KEY = "aiRoutine"
MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5MB limit
DEFAULT_ENDPOINT = "http://localhost:8000/api/generate"


# ------------------------------------------------------------------
# States & Enums
# ------------------------------------------------------------------
class EditorState(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"


class ViewMode(str, Enum):
    VIEWING = "viewing"
    EDITING = "editing"


class Variant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass
class Notification:
    title: str
    description: str
    variant: Variant = Variant.DEFAULT


@dataclass
class ImageFile:
    name: str
    data: bytes
    content_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ImageFile":
        path = Path(path)
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return cls(name=path.name, data=path.read_bytes(), content_type=content_type)

    @property
    def size(self) -> int:
        return len(self.data)

    def to_data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"


# ------------------------------------------------------------------
# Routine Editor
# ------------------------------------------------------------------
class RoutineEditor:
    """
    Client session for generating, editing and saving one routine.

    ``state`` tracks the request lifecycle (idle/generating) and ``mode``
    whether the routine is shown as-is or as raw JSON being edited. The
    last saved routine is loaded once, when the editor is created.
    """

    def __init__(
        self,
        storage: LocalStorage,
        endpoint: str = DEFAULT_ENDPOINT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        listeners: Optional[List[Callable[[Notification], None]]] = None,
    ):
        self.storage = storage
        self.endpoint = endpoint
        self.transport = transport
        self.listeners = list(listeners or [])

        self.user_input = ""
        self.image_file: Optional[ImageFile] = None
        self.routine: Optional[Routine] = None
        self.raw_routine = ""
        self.state = EditorState.IDLE
        self.mode = ViewMode.VIEWING
        self.notifications: List[Notification] = []

        self._load_saved_routine()

    @property
    def is_generating(self) -> bool:
        return self.state is EditorState.GENERATING

    @property
    def is_editing(self) -> bool:
        return self.mode is ViewMode.EDITING

    def notify(self, title: str, description: str, variant: Variant = Variant.DEFAULT):
        notification = Notification(title, description, variant)
        self.notifications.append(notification)
        if variant is Variant.DESTRUCTIVE:
            logger.warning(f"{title}: {description}")
        else:
            logger.info(f"{title}: {description}")
        for listener in self.listeners:
            listener(notification)

    def _load_saved_routine(self):
        try:
            saved = self.storage.get_item(STORAGE_KEY)
            if saved is None:
                return
            routine = Routine.model_validate_json(saved)
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Error loading saved routine: {e}")
            return

        self._show(routine)

    def _show(self, routine: Routine):
        self.routine = routine
        self.raw_routine = routine.to_json(indent=2)

    def _parse_raw(self) -> Routine:
        return Routine.model_validate_json(self.raw_routine)

    # --- INPUT ---

    def set_input(self, text: str):
        self.user_input = text

    def set_raw(self, text: str):
        self.raw_routine = text

    def select_image(self, image: ImageFile) -> bool:
        if image.size > MAX_IMAGE_SIZE:
            self.notify(
                "File too large",
                "Please select an image smaller than 5MB.",
                Variant.DESTRUCTIVE,
            )
            return False

        self.image_file = image
        self.notify("Image uploaded", f"Selected: {image.name}")
        return True

    # --- GENERATION ---

    async def generate(self) -> bool:
        if not self.user_input.strip():
            self.notify(
                "Input required",
                "Please describe what kind of routine you want to create.",
                Variant.DESTRUCTIVE,
            )
            return False

        self.state = EditorState.GENERATING
        try:
            image = self.image_file.to_data_uri() if self.image_file else ""

            # No timeout: a hung handler keeps the editor generating
            async with httpx.AsyncClient(transport=self.transport, timeout=None) as client:
                response = await client.post(
                    self.endpoint, json={"prompt": self.user_input, "image": image}
                )
            response.raise_for_status()
            routine = Routine.model_validate(response.json()["routine"])

            self._show(routine)
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Error generating routine: {e}")
            self.notify(
                "Generation failed",
                "Unable to generate routine. Please try again.",
                Variant.DESTRUCTIVE,
            )
            return False
        finally:
            self.state = EditorState.IDLE

        self.notify(
            "Routine generated!",
            "Your AI-powered routine has been created successfully.",
        )
        return True

    # --- EDITING & SAVING ---

    def toggle_edit(self) -> bool:
        if not self.is_editing:
            self.mode = ViewMode.EDITING
            return True

        try:
            routine = self._parse_raw()
        except ValueError:
            self.notify(
                "Invalid format",
                "Please check your JSON format before saving.",
                Variant.DESTRUCTIVE,
            )
            return False

        self.routine = routine
        self.mode = ViewMode.VIEWING
        return True

    def save(self) -> bool:
        try:
            routine = self._parse_raw() if self.is_editing else self.routine
        except ValueError:
            self.notify(
                "Save failed",
                "Invalid JSON format. Please check your edits.",
                Variant.DESTRUCTIVE,
            )
            return False

        if routine is None:
            self.notify("Nothing to save", "Generate a routine first.", Variant.DESTRUCTIVE)
            return False

        try:
            self.storage.set_item(STORAGE_KEY, routine.to_json())
        except (OSError, ValueError) as e:
            logger.error(f"Error saving routine: {e}")
            self.notify(
                "Save failed",
                "Your routine could not be written to local storage.",
                Variant.DESTRUCTIVE,
            )
            return False

        self.routine = routine
        self.mode = ViewMode.VIEWING
        self.notify("Routine saved!", "Your routine has been saved to local storage.")
        return True
