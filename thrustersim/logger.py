"""
Logging configuration for thruster simulations.

Provides a main program logger with console and file output, module level
loggers that share the main handlers, and a log record field carrying the
current simulation time so controller messages can be lined up with the step
that produced them.


Functions
---------
**Setup Functions:**

    setupMain(fileName, fileFormat, fileLevel, outFormat, outLevel)
        Configure and return main program logger.

**Logger Management:**

    addLog(name)
        Create logger that uses main logger handlers.
    noneLog(name)
        Create logger with no handlers (warnings only).
    removeLog(name)
        Remove logger and close unshared handlers.

**Handler Management:**

    addMainHandlers(subLog)
        Add main logger handlers to sublevel logger.
    removeHandlers(name)
        Remove all handlers from logger, closing unshared ones.
    closeHandler(handler)
        Close handler and update global variables.
    deepRemoveHandler(handler)
        Remove handler from all loggers and close it.

**Custom Features:**

    customRecordFactory(args, kwargs)
        Add simulation time field to log records.
    CustomFormatter
        Format log records with bracketed function names and multi-line support.


Global Variables
----------------
log : logging.Logger
    Main simulation logger instance.
consoleHandler : logging.StreamHandler
    Shared console output handler.
fileHandler : logging.FileHandler
    Shared file output handler.
simTime : str
    Current simulation time for log records (seconds, two decimals).


Notes
-----
Module loggers are created at import time through addLog(). When the main
logger does not exist yet, their names are parked in a pending list and the
main handlers are attached once setupMain() runs. The Simulator writes simTime
at the top of every step.
"""

from typing import Optional
from datetime import datetime
import logging
import os

#-----------------------------------------------------------------------------#

# Logging levels
DEBUG = logging.DEBUG           # 10
INFO = logging.INFO             # 20
WARNING = logging.WARNING       # 30
ERROR = logging.ERROR           # 40
CRITICAL = logging.CRITICAL     # 50

# Log record component formats
SIMTIME = '%(simTime)8s'
DATETIME = '%(asctime)s'
NAME = '%(name)-6s'
LEVEL = '%(levelname)-7s'
FUNCTION = '%(funcName)s'
MESSAGE = '%(message)s'

# Formatting strings
FMT_DATE = '%H:%M:%S'
FMT_OUT = '|' + SIMTIME + '| ' + NAME + ' : ' + LEVEL + ' > ' + MESSAGE
FMT_FILE = ('|' + SIMTIME + ' ' + DATETIME + '| ' + NAME + ' ' + LEVEL + ' '
            + FUNCTION + ' : ' + MESSAGE)

# Main logger name
MAIN_LOG = 'thrSim'

# Global variables -----------------------------------------------------------#

# Main logger and main handlers
log = None
consoleHandler = None
fileHandler = None

# Loggers waiting for the main handlers
pending = []

# Custom record field
oldFactory = logging.getLogRecordFactory()
simTime = '0.00'

###############################################################################

class CustomFormatter(logging.Formatter):
    """
    Log formatter with bracketed function names and multi-line support.

    Function names are wrapped in brackets and padded to a fixed width. When a
    message spans several lines, the record prefix is repeated on each line so
    multi-line reports (run summaries, configuration dumps) stay aligned.


    Parameters
    ----------
    fmt : str, optional
        Log record format string.
    datefmt : str, optional
        Date/time format string.
    """

    def __init__(self, fmt:str=None, datefmt:str=None)->None:
        super().__init__(fmt, datefmt)

    def format(self, record:logging.LogRecord)->str:
        """Format record, repeating the prefix on every message line."""

        if (not record.funcName.startswith("[")):
            func = f"[{record.funcName}]"
            record.funcName = f"{func:22}"

        newline = '\n'
        if (isinstance(record.msg, str) and (newline in record.msg)):
            record = logging.makeLogRecord(record.__dict__)
            prefixFmt, _, _ = self._fmt.partition(MESSAGE)
            if (DATETIME in prefixFmt):
                record.asctime = self.formatTime(record, self.datefmt)
            prefix = prefixFmt % record.__dict__
            record.msg = (newline + prefix).join(record.msg.split(newline))

        return super().format(record)

###############################################################################

def customRecordFactory(*args, **kwargs)->logging.LogRecord:
    """
    Create log record with the custom simTime field.

    Returns
    -------
    record : logging.LogRecord
        Log record with simTime attribute copied from the module global.
    """

    record = oldFactory(*args, **kwargs)
    record.simTime = simTime
    return record

###############################################################################

def addMainHandlers(subLog:logging.Logger)->None:
    """
    Add main logger handlers (console, file) to sublevel logger.

    Parameters
    ----------
    subLog : logging.Logger
        Logger to receive main handlers. Handlers that are not set up are
        skipped.
    """

    if (consoleHandler is not None):
        subLog.addHandler(consoleHandler)
    if (fileHandler is not None):
        subLog.addHandler(fileHandler)
    subLog.debug('%s logger activated', subLog.name)

###############################################################################

def setupMain(fileName:Optional[str] = MAIN_LOG+'.log',
              fileFormat:Optional[str] = FMT_FILE,
              fileLevel:int = DEBUG,
              outFormat:Optional[str] = FMT_OUT,
              outLevel:int = INFO,
              )->logging.Logger:
    """
    Configure and return main program logger with console and file handlers.


    Parameters
    ----------
    fileName : str, default='thrSim.log'
        Log file name. If None, file output disabled.
    fileFormat : str, optional
        Format string for file handler. If None, file output disabled.
    fileLevel : int, default=DEBUG
        Minimum log level for file handler.
    outFormat : str, optional
        Format string for console handler. If None, console output disabled.
    outLevel : int, default=INFO
        Minimum log level for console handler.


    Returns
    -------
    log : logging.Logger
        Main logger instance with configured handlers.


    Notes
    -----
    - Installs the custom record factory for the simTime field.
    - Attaches the main handlers to every logger created before this call.
    - Calling it again returns the existing main logger unchanged.
    """

    global log, consoleHandler, fileHandler

    if (log is not None):
        return log

    logging.setLogRecordFactory(customRecordFactory)
    log = logging.getLogger(MAIN_LOG)
    log.setLevel(DEBUG)

    if (outFormat is not None):
        if (consoleHandler is None):
            consoleHandler = logging.StreamHandler()
            consoleHandler.set_name('Console handler')
            consoleHandler.setLevel(outLevel)
            consoleHandler.setFormatter(CustomFormatter(outFormat))
        log.addHandler(consoleHandler)
        log.info('Console logging started')

    if ((fileName is not None) and (fileFormat is not None)):
        if (fileHandler is None):
            fileHandler = logging.FileHandler(fileName)
            fileHandler.set_name('File handler')
            fileHandler.setLevel(fileLevel)
            fileHandler.setFormatter(CustomFormatter(fileFormat, FMT_DATE))
        log.addHandler(fileHandler)
        start = datetime.now().strftime("%m/%d/%Y %H:%M:%S")
        log.info('File logging started at %s in %s',
                 start, os.path.basename(fileName))

    while pending:
        addMainHandlers(logging.getLogger(pending.pop()))

    return log

###############################################################################

def addLog(name:str)->logging.Logger:
    """
    Create logger that shares the main logger handlers.


    Parameters
    ----------
    name : str
        Logger name.


    Returns
    -------
    logger : logging.Logger
        New or existing logger. A new logger created before setupMain() is
        parked in the pending list.
    """

    if (name in logging.Logger.manager.loggerDict):
        return logging.getLogger(name)

    thisLog = logging.getLogger(name)
    thisLog.setLevel(DEBUG)
    if (log is None):
        pending.append(name)
    else:
        addMainHandlers(thisLog)
    return thisLog

###############################################################################

def noneLog(name:str)->logging.Logger:
    """
    Create or configure logger with no handlers.


    Parameters
    ----------
    name : str
        Logger name.


    Returns
    -------
    logger : logging.Logger
        Logger without handlers at WARNING level. Warnings and errors still
        reach stderr through the logging last resort handler.
    """

    global log

    thisLog = logging.getLogger(name)
    thisLog.setLevel(WARNING)

    if (thisLog.handlers):
        if (thisLog is log):
            while thisLog.handlers:
                deepRemoveHandler(thisLog.handlers[0])
        else:
            removeHandlers(name)

    if (name == MAIN_LOG):
        log = thisLog

    return thisLog

###############################################################################

def closeHandler(handler:logging.Handler)->None:
    """
    Close handler, clearing the matching global if it is a main handler.

    Parameters
    ----------
    handler : logging.Handler
        Handler to close.
    """

    global consoleHandler, fileHandler

    handler.close()
    if (handler is consoleHandler):
        consoleHandler = None
    elif (handler is fileHandler):
        fileHandler = None

###############################################################################

def _isShared(handler:logging.Handler)->bool:
    """True if any registered logger still holds the handler."""
    for l in logging.Logger.manager.loggerDict.values():
        if (isinstance(l, logging.Logger) and (handler in l.handlers)):
            return True
    return False

###############################################################################

def removeHandlers(name:str)->None:
    """
    Remove all handlers from logger, closing the ones no other logger uses.

    Parameters
    ----------
    name : str
        Logger name.
    """

    thisLog = logging.getLogger(name)
    while thisLog.handlers:
        handler = thisLog.handlers[0]
        thisLog.removeHandler(handler)
        if (not _isShared(handler)):
            closeHandler(handler)

###############################################################################

def deepRemoveHandler(handler:logging.Handler)->None:
    """
    Remove handler from every registered logger and close it.

    Parameters
    ----------
    handler : logging.Handler
        Handler to remove and close.
    """

    for thisLog in logging.Logger.manager.loggerDict.values():
        if (isinstance(thisLog, logging.Logger) and
            (handler in thisLog.handlers)):
            thisLog.removeHandler(handler)
    closeHandler(handler)

###############################################################################

def removeLog(name:str)->None:
    """
    Remove logger and close its unshared handlers.

    Parameters
    ----------
    name : str
        Logger name to remove. Removing the main logger resets the module so
        setupMain() can build a fresh one.
    """

    global log

    thisLog = logging.getLogger(name)
    removeHandlers(name)
    del logging.Logger.manager.loggerDict[name]
    if (thisLog is log):
        log = None
