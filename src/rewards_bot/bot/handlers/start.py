"""开始与帮助处理器"""

from telegram import Update
from telegram.ext import CommandHandler, ContextTypes

from rewards_bot.bot.decorators import require_admin
from rewards_bot.bot.handlers._helpers import reply

HELP_TEXT = """📖 使用帮助

👤 账号：
/accounts - 账号列表
/add <Token 或回调 URL> [名称] - 添加账号
/remove <账号> - 删除账号
/toggle <账号> - 启用/禁用账号
/cron <账号> <表达式|off> - 设置账号独立定时
/ignorerisk <账号> - 切换忽略风控
/refresh <账号> - 刷新积分与进度
/history <账号> - 积分历史

🚀 任务：
/run [账号] - 执行单个账号，省略则批量执行
/stop - 中断批量任务（当前账号完成后停止）

⏰ 定时器：
/timers - 定时器概览
/timers <ID> - 启用/停用定时器
/reset <ID> - 清空上次运行时间

💾 数据：
/backup [list|restore 文件名] - 本地备份/列表/恢复
/sync <名称> - 立即上传到云端
/logs [数量] - 系统日志

💡 <账号> 可以是 ID、ID 前缀或名称"""


@require_admin
async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """开始命令"""
    await reply(update, "👋 MS Rewards 多账号助手\n\n发送 /help 查看命令列表")


@require_admin
async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """帮助命令"""
    await reply(update, HELP_TEXT)


start_handler = CommandHandler("start", start_command)
help_handler = CommandHandler("help", help_command)
