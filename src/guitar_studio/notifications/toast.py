from __future__ import annotations

from typing import Dict, List, Union

from blinker import Namespace
from flask import flash, get_flashed_messages, has_request_context

from ..core.enums import ToastType

_signals = Namespace()

#: Receivers get ``toast={"message": ..., "type": ...}``.
show_toast_signal = _signals.signal("show-toast")

_TOAST_CATEGORIES = [t.value for t in ToastType]


def show_toast(message: str, toast_type: Union[ToastType, str] = ToastType.INFO, *, sender: object = None) -> Dict[str, str]:
    toast = {"message": message, "type": ToastType(toast_type).value}
    show_toast_signal.send(sender, toast=toast)
    if has_request_context():
        flash(message, toast["type"])
    return toast


def show_error(message: str) -> Dict[str, str]:
    return show_toast(message, ToastType.ERROR)


def show_success(message: str) -> Dict[str, str]:
    return show_toast(message, ToastType.SUCCESS)


def show_info(message: str) -> Dict[str, str]:
    return show_toast(message, ToastType.INFO)


def drain_toasts() -> List[Dict[str, str]]:
    """Pop toasts queued in the session for the browser."""

    return [
        {"message": message, "type": category}
        for category, message in get_flashed_messages(with_categories=True, category_filter=_TOAST_CATEGORIES)
    ]
