"""
启动 GhostFund 后端服务
"""

import uvicorn

from ghostfund.config import HOST, PORT

if __name__ == "__main__":
    uvicorn.run("ghostfund.main:app", host=HOST, port=PORT)
