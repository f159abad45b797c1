def group_tags(result, generator, request, public):
    """Collapse router-generated tags into one tag per functional area."""
    patterns = [
        (lambda p: p.startswith("/api/v1/auth/jwt/"), "JWT Authentication"),
        (lambda p: p.startswith("/api/v1/attendance/"), "Attendance"),
        (lambda p: p.startswith("/api/v1/payroll/records/"), "Payroll Records"),
        (lambda p: p.startswith("/api/v1/payroll/"), "Payroll"),
        (lambda p: p == "/api/v1/schema/", "Meta"),
    ]
    for path, operations in result.get("paths", {}).items():
        tag = None
        for pred, name in patterns:
            if pred(path):
                tag = name
                break
        if tag is None:
            continue
        for op in operations.values():
            op["tags"] = [tag]
    return result
