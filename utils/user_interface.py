"""
Operator Prompts
"""

from loguru import logger


def proceed_anyways(message: str, assume_yes: bool = False) -> bool:
    """
    Ask the operator whether to continue after a failed check

    Args:
        message: Description of what failed
        assume_yes: Skip the prompt and continue

    Returns:
        True if the operator wants to continue
    """
    logger.warning(message)

    if assume_yes:
        logger.warning("Proceeding anyways (--yes)")
        return True

    try:
        answer = input("Proceed anyways? [yN] ")
    except EOFError:
        return False

    return answer.strip().lower() in ('y', 'yes')
