"""SMTP mail transport configured per studio.

Port 465 uses implicit TLS; any other port upgrades with STARTTLS when the
server offers it.
"""
from __future__ import annotations

import asyncio
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate, make_msgid
from typing import Optional

from inkform.integrations.base import MailTransport

logger = logging.getLogger(__name__)

_IMPLICIT_TLS_PORT = 465


class SMTPMailTransport(MailTransport):
    def __init__(
        self,
        host: str,
        port: int,
        username: Optional[str],
        password: Optional[str],
        from_address: str,
        *,
        timeout: int = 10,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_address = from_address
        self.timeout = timeout

    def _build_message(self, to: str, subject: str, html: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_address
        msg["To"] = to
        msg["Date"] = formatdate(localtime=False)
        domain = self.from_address.rpartition("@")[2].strip(">") or None
        msg["Message-ID"] = make_msgid(domain=domain)
        msg.attach(MIMEText(html, "html", "utf-8"))
        return msg

    def _send_sync(self, msg: MIMEMultipart, to: str) -> None:
        context = ssl.create_default_context()
        if self.port == _IMPLICIT_TLS_PORT:
            server = smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout)
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            if self.port != _IMPLICIT_TLS_PORT:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls(context=context)
                    server.ehlo()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.sendmail(self.from_address, [to], msg.as_string())
        finally:
            try:
                server.quit()
            except smtplib.SMTPException as exc:
                logger.debug("SMTP: QUIT failed on %s:%s: %s", self.host, self.port, exc)
                server.close()

    async def send(self, to: str, subject: str, html: str) -> str:
        msg = self._build_message(to, subject, html)
        await asyncio.get_running_loop().run_in_executor(None, self._send_sync, msg, to)
        logger.info("SMTP: sent '%s' via %s:%s", subject, self.host, self.port)
        return msg["Message-ID"]
