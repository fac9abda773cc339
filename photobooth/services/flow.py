"""Top level screen sequence of the booth.

``ScreenFlow.step`` is the whole transition table: it takes the active
screen and one event and returns the screen that is active afterwards plus at
most one command. When the returned screen is a new instance the command is
its entry action; otherwise it is a follow-up of the event. It never performs
I/O, the kiosk runner executes the commands.
"""
import logging
from typing import NamedTuple, Optional

from photobooth.models.booth import BoothConfig
from photobooth.models.delivery import DeliveryOutcome, DeliveryResult
from photobooth.models.events import (
    AlertTimedOut, CaptureButtonPressed, CaptureFrame, Command, ComposeImage,
    CompositionFailed, CompositionFinished, ConfigConfirmed, DeliveryFinished,
    DeviceFailed, EmailInputChanged, EmailSubmitted, ErrorAcknowledged, Event,
    FrameCaptured, OpenCamera, SendImage, StartAlertTimer, Tick
)
from photobooth.services.capture_sequence import SequenceSignal
from photobooth.services.email_validator import SubmitOutcome
from photobooth.services.screens import (
    AlertScreen, CameraScreen, ConfigScreen, EmailScreen, ErrorScreen,
    GenerationScreen, Screen, SendingScreen
)

logger = logging.getLogger(__name__)

GENERIC_ERROR_TITLE = "Something went wrong"


class Step(NamedTuple):
    screen: Screen
    command: Optional[Command] = None


class ScreenFlow:
    def __init__(self, config: BoothConfig, countdown_from: int = 3, alert_timeout: float = 4.0):
        self.config = config
        self.countdown_from = countdown_from
        self.alert_timeout = alert_timeout

    def initial(self) -> Step:
        return Step(ConfigScreen(self.config))

    def step(self, screen: Screen, event: Event) -> Step:
        handler = getattr(self, f"_on_{screen.kind.value}")
        result = handler(screen, event)
        if result is None:
            return Step(screen)
        return result

    # entry points, each returns the new screen with its entry action

    def camera(self, camera_index: int) -> Step:
        screen = CameraScreen(self.config, camera_index, self.countdown_from)
        return Step(screen, OpenCamera(camera_index))

    def generation(self, screen: CameraScreen) -> Step:
        frames = list(screen.sequence.frames)
        return Step(GenerationScreen(self.config, screen.camera_index, frames), ComposeImage(frames))

    def alert(self, screen: Screen, title: str, content: str) -> Step:
        alert = AlertScreen(self.config, screen.camera_index, title, content, self.alert_timeout)
        return Step(alert, StartAlertTimer(self.alert_timeout))

    def error(self, screen: Screen, title: str, content: str) -> Step:
        return Step(ErrorScreen(self.config, screen.camera_index, title, content))

    # per screen handlers, None means the event is not handled

    def _on_config(self, screen: ConfigScreen, event: Event) -> Optional[Step]:
        if isinstance(event, ConfigConfirmed):
            return self.camera(event.camera_index)
        return self._ignore(screen, event)

    def _on_camera(self, screen: CameraScreen, event: Event) -> Optional[Step]:
        sequence = screen.sequence
        if isinstance(event, CaptureButtonPressed):
            sequence.press_capture()
            return None
        if isinstance(event, Tick):
            signal = sequence.tick(event.dt)
            if signal == SequenceSignal.capture:
                return Step(screen, CaptureFrame())
            if signal == SequenceSignal.finished:
                return self.generation(screen)
            return None
        if isinstance(event, FrameCaptured):
            sequence.frame_captured(event.frame)
            return None
        if isinstance(event, DeviceFailed):
            return self.error(screen, "Camera problem", event.message)
        return self._ignore(screen, event)

    def _on_generation(self, screen: GenerationScreen, event: Event) -> Optional[Step]:
        if isinstance(event, CompositionFinished):
            screen.finish(event.printable_image, event.preview_image)
            return None
        if isinstance(event, CompositionFailed):
            logger.error("Image generation failed: %s", event.message)
            return self.error(screen, GENERIC_ERROR_TITLE, "Failed to generate your image.")
        if isinstance(event, Tick):
            screen.progress.advance(event.dt)
            if screen.is_done:
                email = EmailScreen(
                    self.config, screen.camera_index, screen.preview_image, screen.printable_image
                )
                return Step(email)
            return None
        return self._ignore(screen, event)

    def _on_email(self, screen: EmailScreen, event: Event) -> Optional[Step]:
        if isinstance(event, EmailInputChanged):
            screen.form.input(event.text)
            return None
        if isinstance(event, EmailSubmitted):
            outcome = screen.form.submit()
            if outcome == SubmitOutcome.finish:
                addresses = list(screen.form.addresses)
                sending = SendingScreen(self.config, screen.camera_index, screen.printable_image, addresses)
                return Step(sending, SendImage(screen.printable_image, addresses))
            if outcome == SubmitOutcome.cancel:
                return self.alert(
                    screen, "Photos deleted", "Your photos were not sent and have been deleted."
                )
            return None
        return self._ignore(screen, event)

    def _on_sending(self, screen: SendingScreen, event: Event) -> Optional[Step]:
        if isinstance(event, DeliveryFinished):
            return self.delivery_finished(screen, event.result)
        return self._ignore(screen, event)

    def delivery_finished(self, screen: Screen, result: DeliveryResult) -> Step:
        if result.outcome == DeliveryOutcome.success:
            return self.alert(
                screen, "All done!", "You should have received an email with your photos attached."
            )
        if result.outcome == DeliveryOutcome.partial_success:
            return self.error(
                screen,
                "Failed to send to some addresses",
                "This could be because of a typo. The failed addresses are: "
                + ", ".join(result.failed_addresses)
            )
        if result.outcome == DeliveryOutcome.decode_failure:
            return self.error(
                screen, GENERIC_ERROR_TITLE,
                "We couldn't parse the response from the server. Try again later."
            )
        if result.outcome == DeliveryOutcome.transfer_failure:
            return self.error(
                screen, GENERIC_ERROR_TITLE, "The request didn't go through. Try again later."
            )
        return self.error(screen, GENERIC_ERROR_TITLE, f"Error message: {result.reason}")

    def _on_alert(self, screen: AlertScreen, event: Event) -> Optional[Step]:
        if isinstance(event, AlertTimedOut):
            return self.camera(screen.camera_index)
        return self._ignore(screen, event)

    def _on_error(self, screen: ErrorScreen, event: Event) -> Optional[Step]:
        if isinstance(event, ErrorAcknowledged):
            if screen.camera_index is None:
                return Step(ConfigScreen(self.config))
            return self.camera(screen.camera_index)
        return self._ignore(screen, event)

    @staticmethod
    def _ignore(screen: Screen, event: Event) -> None:
        logger.debug("%s ignores %s", screen.kind.value, type(event).__name__)
        return None
