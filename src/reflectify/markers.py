from typing import TYPE_CHECKING, Annotated, Any, TypeVar, Union, get_args, get_origin

T = TypeVar("T")
_ANNOTATED_MARKER_MIN_ARGS = 2


class RefMarker:
    """A marker used to indicate a struct parameter is held by reference.

    Reference parameters describe as ``Kind.POINTER`` instead of ``Kind.STRUCT``.
    """

    def __repr__(self) -> str:
        return "RefMarker()"


if TYPE_CHECKING:
    Ref = Union[T, T]  # noqa: UP007,PYI016
    """Declare a struct parameter as passed by reference.

    At runtime ``Ref[T]`` becomes ``Annotated[T, RefMarker()]``.

    Examples:
        .. code-block:: python

            def rename(user: Ref[User], name: str) -> None:
                user.name = name
    """

else:

    class Ref:
        """Declare a struct parameter as passed by reference.

        At runtime ``Ref[T]`` resolves to ``Annotated[T, RefMarker()]``.

        Examples:
            .. code-block:: python

                def rename(user: Ref[User], name: str) -> None:
                    user.name = name

        """

        def __class_getitem__(cls, item: T) -> Annotated[T, RefMarker]:
            if get_origin(item) is Annotated:
                args = get_args(item)
                return _build_annotated((args[0], *args[1:], RefMarker()))
            return _build_annotated((item, RefMarker()))


def is_ref_annotation(annotation: Any) -> bool:
    """Return True when annotation is Annotated[..., RefMarker()]."""
    if get_origin(annotation) is not Annotated:
        return False
    annotation_args = get_args(annotation)
    if len(annotation_args) < _ANNOTATED_MARKER_MIN_ARGS:
        return False
    return any(isinstance(item, RefMarker) for item in annotation_args[1:])


def strip_annotated(annotation: Any) -> Any:
    """Return the bare type behind any ``Annotated`` wrapper."""
    while get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    return annotation


def _build_annotated(params: tuple[object, ...]) -> Any:
    """Return Annotated[...] with a pre-built params tuple (Py 3.10+ compatible)."""
    try:
        return Annotated.__class_getitem__(params)  # type: ignore[attr-defined]
    except AttributeError:
        return Annotated.__getitem__(params)  # type: ignore[attr-defined]
