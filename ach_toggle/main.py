from fastapi import FastAPI, UploadFile, File
from .models import InspectResponse, HealthResponse
from .toggle import inspect_bytes

app = FastAPI(
    title="ach-toggle",
    description="Read-only split/unsplit detection for ACH files",
    version="0.1.0",
)

@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}

@app.post("/inspect", response_model=InspectResponse)
async def inspect_ach(file: UploadFile = File(...)):
    raw = await file.read()
    return inspect_bytes(raw, filename=file.filename)
