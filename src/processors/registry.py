"""Build processor chains from chain-spec entries."""

from __future__ import annotations

from typing import Callable, Mapping

from core.chain_spec import ChainSpec, ProcessorSpec
from core.errors import ChainSpecError
from processors.base import MappingProcessor, ProcessorChain
from processors.builtin import (
    ENTRY_KINDS,
    FillMissingNamesProcessor,
    InterfaceInjectionProcessor,
    RenameProcessor,
    SuffixNamesProcessor,
)

ProcessorFactory = Callable[[Mapping[str, object], str], MappingProcessor]


def supported_processor_types() -> tuple[str, ...]:
    """Return processor type names accepted in chain specs."""
    return tuple(sorted(_FACTORIES))


def build_chain(spec: ChainSpec, base_identity: str | None = None) -> ProcessorChain:
    """Instantiate every configured processor in order.

    Args:
        spec: Validated chain spec.
        base_identity: Optional base-table fingerprint folded into the identity.

    Returns:
        Processor chain; empty when the chain spec configures no processors.

    Raises:
        ChainSpecError: If a processor type or its parameters are invalid.
    """
    processors = [
        build_processor(processor_spec, f"chain spec processor #{index + 1}")
        for index, processor_spec in enumerate(spec.processors)
    ]
    return ProcessorChain(processors, base_identity=base_identity)


def build_processor(processor_spec: ProcessorSpec, context: str) -> MappingProcessor:
    factory = _FACTORIES.get(processor_spec.processor_type)
    if factory is None:
        raise ChainSpecError(
            f"Unsupported processor type '{processor_spec.processor_type}' in {context}. "
            f"Use one of: {', '.join(supported_processor_types())}."
        )
    return factory(processor_spec.params, context)


def _build_suffix_names(params: Mapping[str, object], context: str) -> MappingProcessor:
    _validate_keys(params, {"namespace", "suffix", "kinds"}, context)
    kinds = params.get("kinds", list(ENTRY_KINDS))
    kind_rows = _string_list(kinds, "kinds", context)
    unknown_kinds = sorted(set(kind_rows) - set(ENTRY_KINDS))
    if unknown_kinds:
        raise ChainSpecError(
            f"Invalid {context}: unknown kinds {', '.join(unknown_kinds)}. "
            f"Use any of: {', '.join(ENTRY_KINDS)}."
        )
    return SuffixNamesProcessor(
        namespace=_required_string(params, "namespace", context),
        suffix=_required_string(params, "suffix", context),
        kinds=tuple(kind_rows),
    )


def _build_rename(params: Mapping[str, object], context: str) -> MappingProcessor:
    _validate_keys(params, {"namespace", "renames"}, context)
    raw_renames = params.get("renames", {})
    if not isinstance(raw_renames, Mapping) or not all(
        isinstance(key, str) and isinstance(value, str) for key, value in raw_renames.items()
    ):
        raise ChainSpecError(f"Invalid {context}: 'renames' must map strings to strings.")
    return RenameProcessor(
        namespace=_required_string(params, "namespace", context),
        renames=dict(raw_renames),
    )


def _build_fill_missing(params: Mapping[str, object], context: str) -> MappingProcessor:
    _validate_keys(params, {"namespace", "from_namespace"}, context)
    return FillMissingNamesProcessor(
        namespace=_required_string(params, "namespace", context),
        from_namespace=_required_string(params, "from_namespace", context),
    )


def _build_inject_interfaces(params: Mapping[str, object], context: str) -> MappingProcessor:
    _validate_keys(params, {"injections"}, context)
    raw_injections = params.get("injections", {})
    if not isinstance(raw_injections, Mapping):
        raise ChainSpecError(f"Invalid {context}: 'injections' must map classes to interfaces.")
    injections: dict[str, tuple[str, ...]] = {}
    for owner, interfaces in raw_injections.items():
        if not isinstance(owner, str):
            raise ChainSpecError(f"Invalid {context}: injection class names must be strings.")
        injections[owner] = tuple(_string_list(interfaces, f"injections.{owner}", context))
    return InterfaceInjectionProcessor(injections=injections)


def _validate_keys(params: Mapping[str, object], allowed_keys: set[str], context: str) -> None:
    unknown_keys = sorted(set(params) - allowed_keys)
    if unknown_keys:
        raise ChainSpecError(f"Invalid {context}: unknown fields {', '.join(unknown_keys)}.")


def _required_string(params: Mapping[str, object], field_name: str, context: str) -> str:
    raw_value = params.get(field_name)
    if not isinstance(raw_value, str) or not raw_value:
        raise ChainSpecError(f"Invalid {context}: field '{field_name}' must be a non-empty string.")
    return raw_value


def _string_list(value: object, field_name: str, context: str) -> list[str]:
    if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) for item in value):
        raise ChainSpecError(f"Invalid {context}: '{field_name}' must be a list of strings.")
    return list(value)


_FACTORIES: dict[str, ProcessorFactory] = {
    "suffix_names": _build_suffix_names,
    "rename": _build_rename,
    "fill_missing": _build_fill_missing,
    "inject_interfaces": _build_inject_interfaces,
}
