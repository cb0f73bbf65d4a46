"""
Engine supervisor.

Owns the running pollers, the rotation controller and the render timer,
reconciles them against each new Configuration and pushes rendered titles
to the tray surface.
"""

import threading
from typing import Callable, Optional

import structlog

from ..config.defaults import get_default_config
from ..config.settings import Configuration
from ..logging.config import log_reconciliation
from ..provider.client import QuoteProviderClient
from ..quotes.store import QuoteStore
from ..surfaces.base import TraySurface
from .poller import SymbolPoller
from .render import (
    NO_INSTRUMENT_TITLE,
    render_copy_text,
    render_missing_token,
    render_title,
    render_tooltip,
)
from .rotation import RotationController, build_rotation
from .timer import PeriodicTimer

logger = structlog.get_logger(__name__)

PollerFactory = Callable[[str, Configuration, QuoteProviderClient, QuoteStore], SymbolPoller]


class EngineSupervisor:
    """
    Keeps the tray title in sync with the active configuration.

    Lifecycle: start(config) -> apply_configuration(...)* -> shutdown().
    Pollers, rotation and rendering each run on their own timer; this class
    only reconciles them and publishes titles.
    """

    def __init__(
        self,
        tray: TraySurface,
        client: Optional[QuoteProviderClient] = None,
        store: Optional[QuoteStore] = None,
        render_interval: Optional[float] = None,
        poller_factory: PollerFactory = SymbolPoller.from_config,
        rotation_factory: Callable[[Configuration], RotationController] = build_rotation
    ):
        self.tray = tray
        self.client = client if client is not None else QuoteProviderClient()
        self.store = store if store is not None else QuoteStore()
        self.render_interval = render_interval or get_default_config().display.render_interval
        self.poller_factory = poller_factory
        self.rotation_factory = rotation_factory
        self.logger = logger

        self._reconcile_lock = threading.RLock()
        self._title_lock = threading.Lock()
        self._config: Optional[Configuration] = None
        self._pollers: dict[str, SymbolPoller] = {}
        self._rotation: Optional[RotationController] = None
        self._render_timer: Optional[PeriodicTimer] = None
        self._last_title: Optional[str] = None
        self._last_pushed: Optional[str] = None
        self._shut_down = False

    @property
    def active_config(self) -> Optional[Configuration]:
        return self._config

    @property
    def pollers(self) -> dict[str, SymbolPoller]:
        with self._reconcile_lock:
            return dict(self._pollers)

    @property
    def rotation(self) -> Optional[RotationController]:
        return self._rotation

    @property
    def displayed_code(self) -> Optional[str]:
        rotation = self._rotation
        return rotation.displayed_code if rotation is not None else None

    @property
    def last_title(self) -> Optional[str]:
        return self._last_title

    def start(self, config: Configuration) -> None:
        """Apply the first configuration and start the render timer."""
        self.apply_configuration(config)
        with self._reconcile_lock:
            if self._render_timer is None and not self._shut_down:
                self._render_timer = PeriodicTimer(
                    name="render",
                    interval=self.render_interval,
                    callback=self.tick,
                    run_immediately=False
                )
                self._render_timer.start()
        self.tick()
        self.logger.info("Engine started", instruments=config.codes,
                         display_mode=config.display_mode.value)

    def apply_configuration(self, new_config: Configuration) -> None:
        """
        Reconcile running pollers and rotation with a new configuration.

        Added instruments get a poller, removed ones lose their poller and
        quote state, pollers whose captured token/proxy/interval changed are
        restarted and all others keep running untouched.
        """
        with self._reconcile_lock:
            if self._shut_down:
                self.logger.warning("Ignoring configuration applied after shutdown")
                return

            old_config = self._config
            new_codes = new_config.codes
            new_key = SymbolPoller.settings_key(new_config)

            removed = [code for code in self._pollers if code not in new_codes]
            for code in removed:
                self._pollers.pop(code).stop()
                self.store.remove(code)

            added: list[str] = []
            restarted: list[str] = []
            for code in new_codes:
                existing = self._pollers.get(code)
                if existing is not None and existing.captured_settings == new_key:
                    continue
                if existing is not None:
                    existing.stop()
                    restarted.append(code)
                else:
                    added.append(code)
                poller = self.poller_factory(code, new_config, self.client, self.store)
                if existing is not None:
                    poller.take_over_from(existing)
                self._pollers[code] = poller
                poller.start()

            rotation_rebuilt = self._reconcile_rotation(old_config, new_config)
            self._config = new_config

            log_reconciliation(
                self.logger,
                added=added,
                removed=removed,
                restarted=restarted,
                rotation_rebuilt=rotation_rebuilt,
            )

        self.tray.set_tooltip(render_tooltip([inst.label for inst in new_config.instruments]))

    def _reconcile_rotation(self, old: Optional[Configuration], new: Configuration) -> bool:
        rebuild = (
            self._rotation is None
            or old is None
            or old.display_mode != new.display_mode
            or old.rotate_interval != new.rotate_interval
        )
        if rebuild:
            if self._rotation is not None:
                self._rotation.stop()
            self._rotation = self.rotation_factory(new)
            self._rotation.start()
            return True

        if old.codes != new.codes or old.fixed_instrument != new.fixed_instrument:
            self._rotation.retarget(new)
        return False

    def render_current(self) -> str:
        """Render the title for the displayed instrument without publishing it."""
        config = self._config
        code = self.displayed_code
        if config is None or code is None:
            return NO_INSTRUMENT_TITLE
        if not config.token:
            return render_missing_token(code)
        return render_title(code, self.store.get(code), show_trend=config.show_trend)

    def tick(self) -> bool:
        """
        Render and publish the current title.

        Returns:
            True if the tray title was updated, False if it was unchanged
        """
        title = self.render_current()
        with self._title_lock:
            self._last_title = title
            if title == self._last_pushed:
                return False
            self.tray.set_title(title)
            self._last_pushed = title
        return True

    def manual_refresh(self, code: Optional[str] = None, wait: bool = False,
                       timeout: Optional[float] = None) -> list[threading.Thread]:
        """
        Fetch one instrument, or all of them, outside the normal schedule.

        Args:
            code: Instrument to refresh; None refreshes every instrument
            wait: Block until the fetches finish, then re-render
            timeout: Per-fetch wait limit when ``wait`` is set

        Returns:
            The worker threads running the fetches
        """
        pollers = self.pollers
        if code is not None:
            if code not in pollers:
                self.logger.warning("Manual refresh for unknown instrument", code=code)
                return []
            targets = [pollers[code]]
        else:
            targets = list(pollers.values())

        self.logger.info("Manual refresh", codes=[p.code for p in targets])
        workers = [poller.refresh_now() for poller in targets]
        if wait:
            for worker in workers:
                worker.join(timeout)
            self.tick()
        return workers

    def current_display_text(self) -> str:
        """Text for the copy action: label, price and time if known, else the last title."""
        config = self._config
        code = self.displayed_code
        if config is not None and code is not None:
            text = render_copy_text(config.label_for(code), self.store.get(code))
            if text:
                return text
        return self._last_title or self.render_current()

    def shutdown(self) -> None:
        """Stop every timer and poller; nothing writes state afterwards."""
        with self._reconcile_lock:
            if self._shut_down:
                return
            self._shut_down = True

            if self._render_timer is not None:
                self._render_timer.stop(join_timeout=1.0)
                self._render_timer = None
            if self._rotation is not None:
                self._rotation.stop()
            for poller in self._pollers.values():
                poller.stop()
            stopped = list(self._pollers)
            self._pollers.clear()

        self.logger.info("Engine shut down", stopped_pollers=stopped)
