#!/usr/bin/env python
"""Script to run the Taskflow API server."""
import os

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "taskflow.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        reload=True,
    )
