from __future__ import annotations

from typing import Any, Dict, List

from code_roaster.models import HistoryItem


# Shown when no history has been stored yet, or the stored copy is unreadable.
SAMPLE_HISTORY: List[Dict[str, Any]] = [
    {
        "id": "hist_001",
        "filename": "userService.js",
        "language": "javascript",
        "reviewResult": {
            "score": 75,
            "summary": {"totalIssues": 8, "critical": 2, "warning": 4, "info": 2},
            "suggestions": [
                {
                    "id": "sug_001",
                    "type": "security",
                    "severity": "high",
                    "line": 23,
                    "title": "SQL Injection Vulnerability",
                    "description": "Direct string concatenation in SQL query creates security risk",
                    "suggestion": "Use parameterized queries or prepared statements",
                    "codeSnippet": {
                        "original": "const query = `SELECT * FROM users WHERE id = ${userId}`;",
                        "improved": "const query = 'SELECT * FROM users WHERE id = ?'; db.query(query, [userId]);",
                    },
                    "canAutoFix": True,
                },
                {
                    "id": "sug_002",
                    "type": "performance",
                    "severity": "medium",
                    "line": 45,
                    "title": "Inefficient Array Method Chain",
                    "description": "Multiple array iterations can be optimized",
                    "suggestion": "Combine filter and map operations using reduce",
                    "codeSnippet": {
                        "original": "const result = users.filter(u => u.active).map(u => u.name);",
                        "improved": "const result = users.reduce((acc, u) => u.active ? [...acc, u.name] : acc, []);",
                    },
                    "canAutoFix": False,
                },
            ],
            "metadata": {
                "reviewType": "codeQuality",
                "language": "javascript",
                "model": "gpt-4",
                "timestamp": "2025-08-04T10:30:00Z",
                "tokensUsed": 1250,
            },
        },
        "timestamp": "2025-08-04T10:30:00Z",
        "fileSize": 2048,
        "reviewType": "codeQuality",
    },
    {
        "id": "hist_002",
        "filename": "authController.py",
        "language": "python",
        "reviewResult": {
            "score": 88,
            "summary": {"totalIssues": 4, "critical": 0, "warning": 2, "info": 2},
            "suggestions": [
                {
                    "id": "sug_003",
                    "type": "security",
                    "severity": "medium",
                    "line": 15,
                    "title": "Weak Password Validation",
                    "description": "Password requirements are too lenient",
                    "suggestion": "Implement stronger password policy with complexity requirements",
                    "codeSnippet": {
                        "original": "if len(password) < 6:",
                        "improved": (
                            "if not re.match(r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\\d)(?=.*[@$!%*?&])"
                            "[A-Za-z\\d@$!%*?&]{8,}$', password):"
                        ),
                    },
                    "canAutoFix": True,
                },
            ],
            "metadata": {
                "reviewType": "security",
                "language": "python",
                "model": "gpt-4",
                "timestamp": "2025-08-03T14:15:00Z",
                "tokensUsed": 890,
            },
        },
        "timestamp": "2025-08-03T14:15:00Z",
        "fileSize": 1536,
        "reviewType": "security",
    },
    {
        "id": "hist_003",
        "filename": "dataProcessor.ts",
        "language": "typescript",
        "reviewResult": {
            "score": 92,
            "summary": {"totalIssues": 2, "critical": 0, "warning": 1, "info": 1},
            "suggestions": [
                {
                    "id": "sug_004",
                    "type": "style",
                    "severity": "low",
                    "line": 32,
                    "title": "Missing Type Annotations",
                    "description": "Function parameters should have explicit type annotations",
                    "suggestion": "Add type annotations for better type safety",
                    "codeSnippet": {
                        "original": "function processData(data, options) {",
                        "improved": "function processData(data: DataItem[], options: ProcessOptions): ProcessedData {",
                    },
                    "canAutoFix": False,
                },
            ],
            "metadata": {
                "reviewType": "bestPractices",
                "language": "typescript",
                "model": "gpt-4",
                "timestamp": "2025-08-02T09:45:00Z",
                "tokensUsed": 567,
            },
        },
        "timestamp": "2025-08-02T09:45:00Z",
        "fileSize": 3072,
        "reviewType": "bestPractices",
    },
]


def sample_history() -> List[HistoryItem]:
    return [HistoryItem.from_dict(item) for item in SAMPLE_HISTORY]
