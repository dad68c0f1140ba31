# utils/exit_handler.py


def safe_exit(code: str, message: str):
    full_msg = f"{code}: {message}"
    raise SystemExit(f"[Exit] {full_msg}")
