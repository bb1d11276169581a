"""Ví dụ: dùng engine trực tiếp (không qua Flask), với store trong bộ nhớ.

Mục tiêu: minh hoạ Controllers chỉ là lớp mỏng, nghiệp vụ nằm ở Services.
"""

from datetime import datetime

from src.qr_attendance.qr_attendance.attendance.model import ScanRequest
from src.qr_attendance.qr_attendance.container import EngineSettings, build_container
from src.qr_attendance.qr_attendance.core.enums import ScanMode
from src.qr_attendance.qr_attendance.database.memory_tree_store import InMemoryTreeStore


def main():
    store = InMemoryTreeStore({"users": {"u1": {"name": "Ana", "location": "Aurora", "status": "active"}}})
    container = build_container(EngineSettings(store_backend="memory"), store=store)

    clock_in = ScanRequest(user_id="u1", mode=ScanMode.IN, timestamp=datetime(2024, 3, 3, 9, 5), location="Aurora")
    clock_out = ScanRequest(user_id="u1", mode=ScanMode.OUT, timestamp=datetime(2024, 3, 3, 11, 35))

    print(container.dispatcher.submit(clock_in).to_dict())
    print(container.dispatcher.submit(clock_out).to_dict())
    print(store.read("users/u1/stats"))


if __name__ == "__main__":
    main()
