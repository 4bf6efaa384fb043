"""
SOE2Schedule - FastAPI backend.

Endpoints:
    POST /api/process-soe   Run the pipeline on an uploaded SOE PDF
    GET  /api/process-soe   405

Stage flags (includeSoePdf, runUpload, runDetect, runReduce, runTsv,
runJson) are read from form fields or query parameters; "1" turns a flag
on. The response is always 200 JSON; stage failures appear as *Error
fields in the payload.
"""

import asyncio
import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
# request.form() yields starlette UploadFile instances, not fastapi's subclass
from starlette.datastructures import UploadFile

from core.constants import SYSTEM_NAME, SYSTEM_VERSION
from extraction.pipeline import PipelineFlags, run_pipeline

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
logger = logging.getLogger("process-soe")

app = FastAPI(title=SYSTEM_NAME, version=SYSTEM_VERSION)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.post("/api/process-soe")
async def process_soe(request: Request):
    form = await request.form()
    flags = PipelineFlags.from_mapping(query=request.query_params, form=form)

    upload = form.get("file")
    pdf_bytes = None
    filename = "input.pdf"
    if isinstance(upload, UploadFile):
        pdf_bytes = await upload.read()
        filename = upload.filename or filename

    logger.info(f"Request: has_file={pdf_bytes is not None} flags={flags}")

    def blocking():
        return run_pipeline(pdf_bytes, filename=filename, flags=flags, logger=logger)

    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(None, blocking)
    return JSONResponse(result.to_dict())


@app.get("/api/process-soe")
async def process_soe_get():
    return JSONResponse({"error": "Method Not Allowed"}, status_code=405)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
