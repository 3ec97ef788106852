from flask import Flask

from guitar_studio.notifications.toast import drain_toasts, show_error, show_info, show_toast_signal


def test_toast_is_published_on_signal():
    received = []

    def on_toast(sender, toast):
        received.append(toast)

    with show_toast_signal.connected_to(on_toast):
        show_error("Không thể lưu")

    assert received == [{"message": "Không thể lưu", "type": "error"}]


def test_toasts_queue_in_request_and_drain_once():
    app = Flask(__name__)
    app.secret_key = "toast-test"

    with app.test_request_context("/"):
        show_info("Đã lưu")
        show_error("Lỗi mạng")
        assert drain_toasts() == [
            {"message": "Đã lưu", "type": "info"},
            {"message": "Lỗi mạng", "type": "error"},
        ]
