"""
MiddleForge Composition Helpers

Front-ends that turn loose middleware into a chain factory.

- use(): list middleware inline, nesting lists/tuples freely
- label(): register middleware under names once, pick them per route

Usage:
    with_middleware = label(
        {"cors": cors, "auth": [load_session, require_user], "timing": timing},
        defaults=["cors"],
    )

    list_users = with_middleware("auth", audit)(list_users_handler)
    health = use(timing)(health_handler)
"""

from collections.abc import Iterable, Mapping, Sequence

from middleforge.core.executor import build_chain
from middleforge.core.types import ChainFactory, Middleware, MiddlewareSpec
from middleforge.errors import InvalidMiddlewareError, UnknownMiddlewareError


def flatten(middleware: Iterable[MiddlewareSpec]) -> list[Middleware]:
    """
    Flatten nested lists/tuples of middleware, keeping their order.

    Raises InvalidMiddlewareError for anything that is neither callable nor
    a list/tuple; `position` counts flattened entries.
    """
    flat: list[Middleware] = []

    def _walk(items: Iterable[MiddlewareSpec]) -> None:
        for item in items:
            if isinstance(item, (list, tuple)):
                _walk(item)
            elif callable(item):
                flat.append(item)
            else:
                raise InvalidMiddlewareError(item, len(flat))

    _walk(middleware)
    return flat


def use(*middleware: MiddlewareSpec, name: str | None = None) -> ChainFactory:
    """
    Build a chain factory from middleware listed inline.

    Usage:
        handler = use(cors, [load_session, require_user])(list_users)
        await handler(request, response)
    """
    return build_chain(flatten(middleware), name=name)


def label(
    middleware: Mapping[str, MiddlewareSpec],
    defaults: Sequence[str] = (),
):
    """
    Register middleware under labels.

    Returns `with_middleware(*chosen, name=None)`: each chosen item is a label
    or middleware (or a list of them). Labels in `defaults` always run first.

    Raises UnknownMiddlewareError when a default or chosen label is unknown.
    """
    labelled: dict[str, list[Middleware]] = {
        key: flatten([value]) for key, value in middleware.items()
    }

    def _resolve(item: str | MiddlewareSpec) -> MiddlewareSpec:
        if isinstance(item, str):
            if item not in labelled:
                raise UnknownMiddlewareError(item, sorted(labelled))
            return labelled[item]
        return item

    default_middleware = [_resolve(key) for key in defaults]

    def with_middleware(*chosen: str | MiddlewareSpec, name: str | None = None) -> ChainFactory:
        resolved = [_resolve(item) for item in chosen]
        return use(*default_middleware, *resolved, name=name)

    return with_middleware
