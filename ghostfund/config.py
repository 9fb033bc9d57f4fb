"""
GhostFund 配置模块
从 .env 文件或环境变量中读取配置
"""

import os
from dotenv import load_dotenv

load_dotenv()

# MongoDB 配置
MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017/ghostfund")
DATABASE_NAME = os.getenv("DATABASE_NAME", "ghostfund")

# 服务器配置
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Perplexity 文本补全 API
PERPLEXITY_API_KEY = os.getenv("PERPLEXITY_API_KEY", "")
PERPLEXITY_API_URL = os.getenv("PERPLEXITY_API_URL", "https://api.perplexity.ai")
PERPLEXITY_MODEL = os.getenv("PERPLEXITY_MODEL", "sonar")
AI_MAX_TOKENS = int(os.getenv("AI_MAX_TOKENS", "500"))
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "30"))  # 秒

# 区块链（缺少任意一项时降级为开发模式）
CHAIN_RPC_URL = os.getenv("CHAIN_RPC_URL", "")
PRIVATE_KEY = os.getenv("PRIVATE_KEY", "")
CONTRACT_ADDRESS = os.getenv("CONTRACT_ADDRESS", "")
BLOCKCHAIN_TIMEOUT = float(os.getenv("BLOCKCHAIN_TIMEOUT", "15"))  # 秒

# 业务参数
DEFAULT_DURATION_DAYS = 30
LIST_LIMIT = 100  # 列表接口最大返回条数
