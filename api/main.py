"""
FastAPI Backend for the Finance Tracker Statement Importer
RESTful API endpoints for importing transactions from PDF statements
"""

from fastapi import FastAPI, File, UploadFile, Form, HTTPException
from fastapi.responses import FileResponse
from fastapi.middleware.cors import CORSMiddleware
from typing import Optional
from pathlib import Path
from datetime import datetime
import logging
import uuid

from finance_tracker.config import config
from finance_tracker.extractors.financial_rules import DEFAULT_CATEGORIES
from finance_tracker.loaders.pdf_loader import PDFLoadError
from finance_tracker.logging_config import setup_logging
from finance_tracker.main import StatementImporter, TransactionSummary, parse_categories
from finance_tracker.output.writer import generate_pdf_report
from finance_tracker.validators.financial_validator import ValidationError

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Finance Tracker Import API",
    description="Extract income/expense transactions from PDF bank statements",
    version=config.VERSION
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

REPORTS_DIR = config.OUTPUT_DIR / "api_reports"


def _reports_dir() -> Path:
    REPORTS_DIR.mkdir(parents=True, exist_ok=True)
    return REPORTS_DIR


async def _import_upload(file: UploadFile, categories: Optional[str]):
    """Validate an upload, then decode and extract it. Returns (drafts, importer)."""
    content = await file.read()

    is_valid, error = config.validate_file(file.filename or "", len(content))
    if not is_valid:
        raise HTTPException(status_code=400, detail=error)

    try:
        category_list = parse_categories(categories) if categories else None
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid categories: {e}")

    importer = StatementImporter()
    try:
        drafts = importer.import_bytes(content, category_list, name=file.filename or "<upload>")
    except PDFLoadError as e:
        logger.error(f"Error processing {file.filename}: {e}")
        raise HTTPException(status_code=422, detail=f"Failed to read PDF file: {e}")
    except ValidationError as e:
        logger.error(f"Validation failed for {file.filename}: {e}")
        raise HTTPException(status_code=422, detail=f"Invalid transaction: {e}")

    return drafts, importer


@app.get("/")
async def root():
    """Root endpoint - API information"""
    return {
        "message": "Finance Tracker Import API",
        "version": config.VERSION,
        "endpoints": {
            "POST /import": "Extract transactions from a PDF statement",
            "POST /import/report": "Extract transactions and generate a PDF report",
            "GET /categories/default": "Default category list",
            "GET /health": "Health check",
            "GET /reports": "List generated reports",
            "GET /reports/{filename}": "Download generated report"
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "config": config.to_dict()
    }


@app.get("/categories/default")
async def default_categories():
    return [c.to_dict() for c in DEFAULT_CATEGORIES]


@app.post("/import")
async def import_statement(
    file: UploadFile = File(..., description="PDF bank statement"),
    categories: Optional[str] = Form(None, description="JSON list of {id, name, type}")
):
    """
    Extract transaction drafts from a PDF statement.

    - **file**: PDF statement
    - **categories**: optional JSON list of categories; defaults are used when omitted

    Drafts carry no id; assigning ids is up to the caller's store.
    """
    try:
        drafts, importer = await _import_upload(file, categories)

        return {
            "status": "success" if drafts else "no_transactions",
            "filename": file.filename,
            "count": len(drafts),
            "transactions": [d.to_dict() for d in drafts],
            "stats": importer.stats
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error importing statement: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@app.post("/import/report")
async def import_statement_report(
    file: UploadFile = File(..., description="PDF bank statement"),
    categories: Optional[str] = Form(None, description="JSON list of {id, name, type}")
):
    """Extract drafts and render them into a downloadable PDF report."""
    try:
        drafts, _ = await _import_upload(file, categories)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        report_filename = f"import_{timestamp}_{uuid.uuid4().hex[:8]}.pdf"
        report_path = _reports_dir() / report_filename

        totals = TransactionSummary.totals(drafts)
        generate_pdf_report(
            output_path=str(report_path),
            grouped_drafts=TransactionSummary.group_by_month(drafts),
            source_name=file.filename or "<upload>",
            totals=totals
        )
        logger.info(f"Report generated: {report_filename}")

        return {
            "status": "success",
            "count": len(drafts),
            "totals": {k: round(v, 2) for k, v in totals.items()},
            "report": {
                "filename": report_filename,
                "download_url": f"/reports/{report_filename}",
                "generated_at": datetime.now().isoformat()
            }
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error generating report: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


def _report_path(filename: str) -> Path:
    report_path = _reports_dir() / filename
    # Reject anything that escapes the reports directory
    if report_path.resolve().parent != _reports_dir().resolve() or not report_path.exists():
        raise HTTPException(status_code=404, detail="Report not found")
    return report_path


@app.get("/reports/{filename}")
async def download_report(filename: str):
    """Download a generated PDF report."""
    report_path = _report_path(filename)
    return FileResponse(
        path=str(report_path),
        media_type="application/pdf",
        filename=filename
    )


@app.get("/reports")
async def list_reports():
    """List all available reports"""
    reports = []

    for report_file in _reports_dir().glob("*.pdf"):
        stat = report_file.stat()
        reports.append({
            "filename": report_file.name,
            "created_at": datetime.fromtimestamp(stat.st_ctime).isoformat(),
            "size_bytes": stat.st_size,
            "download_url": f"/reports/{report_file.name}"
        })

    # Newest first
    reports.sort(key=lambda x: x['created_at'], reverse=True)

    return {
        "total_reports": len(reports),
        "reports": reports
    }


@app.delete("/reports/{filename}")
async def delete_report(filename: str):
    """Delete a report file."""
    report_path = _report_path(filename)
    try:
        report_path.unlink()
    except OSError as e:
        raise HTTPException(status_code=500, detail=f"Error deleting report: {str(e)}")

    return {
        "status": "success",
        "message": f"Report {filename} deleted successfully"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT)
