import asyncio
import functools
import logging
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional

from PIL import Image

from photobooth.config import Settings, settings as default_settings
from photobooth.errors import CompositionError, DeviceError
from photobooth.models.booth import BoothConfig
from photobooth.models.delivery import DeliveryResult
from photobooth.models.events import (
    AlertTimedOut, CaptureFrame, Command, ComposeImage, CompositionFailed,
    CompositionFinished, DeliveryFinished, DeviceFailed, Envelope, Event,
    FrameCaptured, OpenCamera, SendImage, StartAlertTimer, Tick
)
from photobooth.services.camera import CameraFeed
from photobooth.services.compositor import compose_printable, encode_png
from photobooth.services.delivery import DeliveryClient
from photobooth.services.flow import ScreenFlow, Step
from photobooth.services.screens import Screen, ScreenKind

logger = logging.getLogger(__name__)


class Kiosk:
    """Runs the screen flow on the asyncio loop.

    Events are applied one at a time in arrival order. Blocking work runs on a
    thread pool and reports back through the same queue, tagged with the
    generation of the screen that asked for it; every screen change bumps the
    generation so results meant for a screen that is gone are dropped.
    """

    def __init__(
            self,
            config: BoothConfig,
            app_settings: Optional[Settings] = None,
            camera_factory: Optional[Callable[[int], CameraFeed]] = None,
            delivery_client: Optional[DeliveryClient] = None,
            executor: Optional[Executor] = None,
            clock: Callable[[], float] = time.monotonic
    ):
        self.config = config
        self.settings = app_settings or default_settings
        self.flow = ScreenFlow(config, self.settings.countdown_from, self.settings.alert_timeout)
        self.camera_factory = camera_factory or self._default_camera
        self.delivery_client = delivery_client or DeliveryClient(
            config.email_server_endpoint, self.settings.delivery_timeout
        )

        self.screen: Optional[Screen] = None
        self.generation = 0
        self.feed: Optional[CameraFeed] = None

        self._executor = executor or ThreadPoolExecutor(
            max_workers=self.settings.worker_count, thread_name_prefix="photobooth"
        )
        self._clock = clock
        self._queue: Optional[asyncio.Queue] = None
        self._consumer: Optional[asyncio.Task] = None
        self._ticker: Optional[asyncio.Task] = None
        self._tasks: set = set()

    @property
    def is_running(self) -> bool:
        return self._consumer is not None and not self._consumer.done()

    async def start(self) -> None:
        self._queue = asyncio.Queue()
        self._enter(self.flow.initial())
        self._consumer = asyncio.create_task(self._consume())

    async def stop(self) -> None:
        for task in [self._consumer, self._ticker, *self._tasks]:
            if task is not None:
                task.cancel()
        self._consumer = None
        self._ticker = None
        if self.feed is not None:
            await self._run_blocking(self.feed.release)
            self.feed = None
        self._executor.shutdown(wait=False)

    def post(self, event: Event, generation: Optional[int] = None) -> None:
        self._queue.put_nowait(Envelope(event, generation))

    def snapshot(self) -> Dict[str, Any]:
        return {
            "screen": self.screen.kind.value,
            "generation": self.generation,
            "data": self.screen.snapshot(),
        }

    def preview_image(self) -> Optional[Image.Image]:
        return getattr(self.screen, "preview_image", None)

    async def encode_camera_preview(self) -> Optional[str]:
        feed = self.feed
        if self.screen.kind != ScreenKind.camera or feed is None:
            return None
        return await self._run_blocking(feed.encode_preview)

    async def encode_preview_image(self) -> Optional[bytes]:
        image = self.preview_image()
        if image is None:
            return None
        return await self._run_blocking(encode_png, image)

    # event loop

    async def _consume(self) -> None:
        while True:
            envelope = await self._queue.get()
            try:
                self._apply(envelope)
            except Exception:
                logger.exception("Failed to apply %s on %s", type(envelope.event).__name__, self.screen)
            finally:
                self._queue.task_done()

    def _apply(self, envelope: Envelope) -> None:
        if envelope.generation is not None and envelope.generation != self.generation:
            logger.info(
                "Discarding stale %s from generation %d (current %d)",
                type(envelope.event).__name__, envelope.generation, self.generation
            )
            return

        step = self.flow.step(self.screen, envelope.event)
        if step.screen is not self.screen:
            self._enter(step)
        elif step.command is not None:
            self._execute(step.command)
        self._sync_ticker()

    def _enter(self, step: Step) -> None:
        previous = self.screen
        self.screen = step.screen
        self.generation += 1
        logger.info(
            "Screen %s -> %s (generation %d)",
            previous.kind.value if previous else None, step.screen.kind.value, self.generation
        )
        if step.command is not None:
            self._execute(step.command)
        self._sync_ticker()

    def _sync_ticker(self) -> None:
        if self.screen.is_animating and (self._ticker is None or self._ticker.done()):
            self._ticker = asyncio.create_task(self._tick_loop())

    async def _tick_loop(self) -> None:
        interval = 1.0 / self.settings.tick_rate
        last = self._clock()
        while self.screen.is_animating:
            await asyncio.sleep(interval)
            now = self._clock()
            self.post(Tick(now - last), self.generation)
            last = now

    # commands

    def _execute(self, command: Command) -> None:
        generation = self.generation
        if isinstance(command, OpenCamera):
            coro = self._open_camera(command.camera_index, generation)
        elif isinstance(command, CaptureFrame):
            coro = self._capture(generation)
        elif isinstance(command, ComposeImage):
            coro = self._compose(command, generation)
        elif isinstance(command, SendImage):
            coro = self._send(command, generation)
        elif isinstance(command, StartAlertTimer):
            coro = self._alert_timer(command.timeout, generation)
        else:
            raise TypeError(f"Unknown command {command!r}")

        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Background task failed", exc_info=task.exception())

    async def _run_blocking(self, fn: Callable, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, functools.partial(fn, *args))

    async def _open_camera(self, camera_index: int, generation: int) -> None:
        if self.feed is not None and self.feed.index != camera_index:
            await self._run_blocking(self.feed.release)
            self.feed = None
        if self.feed is None:
            self.feed = self.camera_factory(camera_index)
        feed = self.feed

        try:
            await self._run_blocking(feed.open)
        except DeviceError as e:
            await self._device_failed(feed, e, generation)
            return

        # the loop ends once the screen that started it is gone
        while generation == self.generation:
            try:
                await self._run_blocking(feed.preview_frame)
            except DeviceError as e:
                await self._device_failed(feed, e, generation)
                return

    async def _device_failed(self, feed: CameraFeed, error: DeviceError, generation: int) -> None:
        logger.error("Camera %s failed: %s", feed.index, error)
        if generation == self.generation:
            await self._run_blocking(feed.release)
            if self.feed is feed:
                self.feed = None
        self.post(DeviceFailed(str(error)), generation)

    async def _capture(self, generation: int) -> None:
        feed = self.feed
        try:
            if feed is None:
                raise DeviceError("Camera is not open")
            frame = await self._run_blocking(feed.capture_still)
        except DeviceError as e:
            logger.error("Frame capture failed: %s", e)
            self.post(DeviceFailed(str(e)), generation)
            return
        self.post(FrameCaptured(frame), generation)

    async def _compose(self, command: ComposeImage, generation: int) -> None:
        try:
            printable, preview = await self._run_blocking(
                compose_printable,
                self.settings.template_image_path,
                command.frames,
                self.config.template,
                self.settings.generated_preview_size
            )
        except (CompositionError, OSError, ValueError) as e:
            self.post(CompositionFailed(str(e)), generation)
            return
        except Exception as e:
            logger.exception("Unexpected error while composing the image")
            self.post(CompositionFailed(str(e)), generation)
            return
        self.post(CompositionFinished(printable, preview), generation)

    async def _send(self, command: SendImage, generation: int) -> None:
        try:
            result = await self._run_blocking(self.delivery_client.deliver, command.image, command.addresses)
        except Exception as e:
            logger.exception("Unexpected error while sending the image")
            result = DeliveryResult.failure(str(e))
        self.post(DeliveryFinished(result), generation)

    async def _alert_timer(self, timeout: float, generation: int) -> None:
        await asyncio.sleep(timeout)
        self.post(AlertTimedOut(), generation)

    def _default_camera(self, camera_index: int) -> CameraFeed:
        return CameraFeed(
            camera_index,
            mirror_preview=self.config.mirror_preview,
            mirror_output=self.config.mirror_output,
            aspect_ratio=self.config.template.frames[0].aspect_ratio,
            border_radius=self.settings.preview_border_radius
        )
