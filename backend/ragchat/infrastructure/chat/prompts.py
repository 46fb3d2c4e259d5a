"""Fixed prompt material sent with every chat completion request."""

SYSTEM_INSTRUCTION = (
    "Answer the user question based on the provided documents "
    "or report that the question cannot be answered based on "
    "these documents. Keep the answer informative but brief, "
    "do not enumerate all possibilities."
)

RELEVANT_DOCUMENT_TEMPLATE = "Relevant document:\n\n{text}"

# chatcompletion_pro addresses every turn by sender type and sender name;
# the reply constraint must name the bot declared in bot_setting.
USER_SENDER_TYPE = "USER"
BOT_SENDER_TYPE = "BOT"
SYSTEM_SENDER_NAME = "系统"
USER_SENDER_NAME = "用户"
BOT_NAME = "MM智能助理"
BOT_PROFILE = (
    "MM智能助理是一款由MiniMax自研的，没有调用其他产品的接口的大型语言模型。"
    "MiniMax是一家中国科技公司，一直致力于进行大模型相关的研究。"
)
