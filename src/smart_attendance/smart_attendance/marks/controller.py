from __future__ import annotations

import io

from flask import Flask, g, jsonify, request, send_file

from ..common.http import iso, json_body
from ..container import Container
from ..core.exceptions import ValidationError
from ..users.auth import bearer_required
from .export import XLSX_MIMETYPE
from .model import MarkSheet, MarkSheetStats, MarkSheetSummary
from .session import strip_marker
from .sheet_command import parse_sheet_command


def _stats_to_dict(stats: MarkSheetStats) -> dict:
    return {
        "totalStudents": stats.total_students,
        "averageMark": stats.average_mark,
        "highestMark": stats.highest_mark,
        "lowestMark": stats.lowest_mark,
    }


def summary_to_dict(s: MarkSheetSummary) -> dict:
    return {"id": s.sheet_id, "subject": s.subject, **_stats_to_dict(s.stats), "savedAt": iso(s.saved_at)}


def sheet_to_dict(s: MarkSheet) -> dict:
    return {
        "id": s.sheet_id,
        "subject": s.subject,
        **_stats_to_dict(s.stats),
        "savedAt": iso(s.saved_at),
        "entries": [{"studentName": e.name, "mark": e.mark} for e in s.entries],
    }


def register(app: Flask, container: Container) -> None:
    teacher_required = bearer_required(container.teacher_service.authenticate, attr="teacher")

    @app.route("/api/teacher/process-voice", methods=["POST"], endpoint="teacher_process_voice")
    @teacher_required
    def teacher_process_voice():
        data = json_body()
        result = container.mark_entry_service.process_voice_text(data.get("text"))
        return jsonify({"success": True, "data": result.to_dict(), "message": "Voice input processed successfully"})

    @app.route("/api/teacher/sheet-command", methods=["POST"], endpoint="teacher_sheet_command")
    @teacher_required
    def teacher_sheet_command():
        layout = parse_sheet_command(json_body().get("text"))
        return jsonify({"success": True, "sheet": layout.to_dict() if layout else None})

    @app.route("/api/teacher/roster", methods=["GET"], endpoint="teacher_roster")
    @teacher_required
    def teacher_roster():
        return jsonify({"success": True, "roster": list(container.roster.roster)})

    @app.route("/api/teacher/correct-name", methods=["POST"], endpoint="teacher_correct_name")
    @teacher_required
    def teacher_correct_name():
        name = strip_marker(str(json_body().get("name") or ""))
        if not name:
            raise ValidationError("Name is required")
        corrected = container.roster.correct(name)
        return jsonify({"success": True, "name": name, "corrected": corrected, "changed": corrected != name})

    @app.route("/api/teacher/generate-excel", methods=["POST"], endpoint="teacher_generate_excel")
    @teacher_required
    def teacher_generate_excel():
        data = json_body()
        export = container.mark_entry_service.generate_excel(data.get("entries"), data.get("subject"))
        return send_file(
            io.BytesIO(export.content),
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name=export.filename,
        )

    @app.route("/api/teacher/save-entries", methods=["POST"], endpoint="teacher_save_entries")
    @teacher_required
    def teacher_save_entries():
        data = json_body()
        sheet = container.mark_entry_service.save(g.teacher.teacher_id, data.get("entries"), data.get("subject"))
        count = len(sheet.entries)
        return jsonify(
            {
                "success": True,
                "message": f'{count} entries saved successfully for "{sheet.subject}"',
                "count": count,
                "id": sheet.sheet_id,
                "stats": {
                    "average": sheet.stats.average_mark,
                    "highest": sheet.stats.highest_mark,
                    "lowest": sheet.stats.lowest_mark,
                },
            }
        )

    @app.route("/api/teacher/mark-entries", methods=["GET"], endpoint="teacher_mark_entries")
    @teacher_required
    def teacher_mark_entries():
        page = container.mark_entry_service.list_sheets(
            g.teacher.teacher_id,
            subject=request.args.get("subject"),
            page=request.args.get("page"),
            limit=request.args.get("limit"),
        )
        return jsonify(
            {
                "success": True,
                "total": page.total,
                "page": page.page,
                "pages": page.pages,
                "records": [summary_to_dict(s) for s in page.items],
            }
        )

    @app.route("/api/teacher/mark-entries/<int:sheet_id>", methods=["GET"], endpoint="teacher_mark_entry")
    @teacher_required
    def teacher_mark_entry(sheet_id: int):
        sheet = container.mark_entry_service.get_sheet(g.teacher.teacher_id, sheet_id)
        return jsonify({"success": True, "record": sheet_to_dict(sheet)})

    @app.route("/api/teacher/mark-entries/<int:sheet_id>", methods=["DELETE"], endpoint="teacher_mark_entry_delete")
    @teacher_required
    def teacher_mark_entry_delete(sheet_id: int):
        container.mark_entry_service.delete_sheet(g.teacher.teacher_id, sheet_id)
        return jsonify({"success": True, "message": "Record deleted successfully"})
