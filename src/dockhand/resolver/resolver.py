"""Layered parameter resolution."""

import logging
from typing import Callable, Dict, Mapping, Optional, Sequence

from dockhand.errors import UnresolvableInput
from dockhand.models.parameter import ParameterSpec, PromptSource
from dockhand.resolver.channel import InteractiveChannel, open_interactive_channel
from dockhand.resolver.validators import sanitize


logger = logging.getLogger(__name__)


class InputResolver:
    """Resolves parameters from flags, environment, derived values and prompts.

    The interactive channel is opened lazily the first time a prompt is
    needed and reused for the rest of the run.
    """

    def __init__(self, channel_factory: Callable[[], Optional[InteractiveChannel]] = open_interactive_channel):
        self._channel_factory = channel_factory
        self._channel: Optional[InteractiveChannel] = None
        self._channel_checked = False

    @property
    def channel(self) -> Optional[InteractiveChannel]:
        """Interactive channel, or None when there is no operator to ask."""
        if not self._channel_checked:
            self._channel = self._channel_factory()
            self._channel_checked = True
            if self._channel is None:
                logger.debug("No interactive channel available")
        return self._channel

    def close(self) -> None:
        if self._channel is not None:
            self._channel.close()
        self._channel = None
        self._channel_checked = False

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def resolve(self, spec: ParameterSpec, resolved: Mapping[str, Optional[str]]) -> Optional[str]:
        """Resolve one parameter given the values resolved before it."""
        last_invalid: Optional[str] = None

        for source in spec.sources:
            if source.interactive:
                continue
            raw = source.candidate(resolved)
            if raw is None:
                continue
            candidate = self._prepare(spec, raw)
            if not candidate:
                continue
            if spec.validator(candidate):
                logger.debug(f"Resolved {spec.name} from {source.describe()}")
                return candidate
            logger.warning(f"Ignoring invalid {spec.name} '{candidate}' from {source.describe()}")
            last_invalid = candidate

        prompt = spec.prompt
        if prompt is None:
            if not spec.required:
                return None
            if last_invalid:
                reason = f"'{last_invalid}' is invalid"
            else:
                reason = "no valid value was supplied"
            if spec.hint:
                reason += f" ({spec.hint.rstrip('.')})"
            raise UnresolvableInput(spec.name, spec.override or None, reason=reason)

        channel = self.channel
        if channel is None:
            if not spec.required:
                return None
            raise UnresolvableInput(spec.name, spec.override or None, reason="no terminal available to prompt")

        return self._ask(spec, prompt, channel, default=last_invalid)

    def resolve_all(self, specs: Sequence[ParameterSpec]) -> Dict[str, Optional[str]]:
        """Resolve parameters in order; each may derive from the ones before it."""
        resolved: Dict[str, Optional[str]] = {}
        for spec in specs:
            if spec.name in resolved:
                raise ValueError(f"Parameter {spec.name} declared twice")
            missing = [name for name in spec.depends_on if name not in resolved]
            if missing:
                raise ValueError(f"Parameter {spec.name} depends on unresolved {', '.join(missing)}")
            resolved[spec.name] = self.resolve(spec, resolved)
        return resolved

    def _ask(
        self,
        spec: ParameterSpec,
        prompt: PromptSource,
        channel: InteractiveChannel,
        default: Optional[str] = None,
    ) -> str:
        while True:
            if default:
                channel.write(f"{prompt.message} [{default}]: ")
            else:
                channel.write(f"{prompt.message}: ")

            line = channel.read_line()
            if line is None:
                raise UnresolvableInput(spec.name, spec.override or None, reason="interactive input closed")

            value = self._prepare(spec, line) or (default or "")
            if value and spec.validator(value):
                return value

            message = f"'{value}' is invalid."
            if spec.hint:
                message += f" {spec.hint}"
            channel.write(message + "\n")

    @staticmethod
    def _prepare(spec: ParameterSpec, raw: str) -> str:
        value = sanitize(raw)
        if value and spec.normalizer:
            value = spec.normalizer(value)
        return value
