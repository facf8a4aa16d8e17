"""
Remote session description built from the transport parameters of the remote
endpoint.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .._types import (
    IceCandidates,
    InvalidStateError,
    MediaObject,
    MediaSectionIdx,
    RtpParameters,
    SessionConfig,
    SessionDocument,
)
from .._utils import logger
from .._writer import write
from ._media_section import AnswerMediaSection, MediaSection, OfferMediaSection


class RemoteSdp:
    """
    The remote side of a WebRTC session, as SDP.

    Holds one media section per m= line and keeps the session document in
    sync with them. Closed sections are recycled for new media and the BUNDLE
    group always lists the open ones.

    Args:
        ice_parameters: Remote ``usernameFragment``, ``password`` and
            optional ``iceLite``.
        ice_candidates: Remote ICE candidates.
        dtls_parameters: Remote ``role`` and ``fingerprints``.
        sctp_parameters: Remote SCTP parameters, if data channels are used.
        config: Session defaults (o= line, connection address, ...).

    Example:
        >>> remote_sdp = RemoteSdp(ice_parameters, ice_candidates, dtls_parameters)
        >>> remote_sdp.send(offer_media_object, "", offer_rtp_parameters, answer_rtp_parameters)
        >>> answer = remote_sdp.get_sdp()
    """

    def __init__(
        self,
        ice_parameters: Dict[str, Any],
        ice_candidates: IceCandidates,
        dtls_parameters: Dict[str, Any],
        sctp_parameters: Optional[Dict[str, Any]] = None,
        config: Optional[SessionConfig] = None,
    ) -> None:
        self._ice_parameters = dict(ice_parameters)
        self._ice_candidates = ice_candidates
        self._dtls_parameters = dict(dtls_parameters)
        self._sctp_parameters = sctp_parameters
        self._config = config or SessionConfig()

        self._media_sections: List[MediaSection] = []
        self._mid_to_index: Dict[str, int] = {}
        self._first_mid = ""

        self._sdp_object: SessionDocument = {
            "version": 0,
            "origin": {
                "address": self._config.origin_address,
                "ipVer": 4,
                "netType": "IN",
                "sessionId": self._config.session_id,
                "sessionVersion": 0,
                "username": self._config.username,
            },
            "name": "-",
            "timing": {"start": 0, "stop": 0},
            "media": [],
        }

        if ice_parameters.get("iceLite"):
            self._sdp_object["icelite"] = "ice-lite"

        self._sdp_object["msidSemantic"] = {"semantic": "WMS", "token": "*"}

        # The latest fingerprint is used.
        fingerprint = dtls_parameters["fingerprints"][-1]
        self._sdp_object["fingerprint"] = {
            "type": fingerprint["algorithm"],
            "hash": fingerprint["value"],
        }

        self._sdp_object["groups"] = [{"type": "BUNDLE", "mids": ""}]

    @property
    def sdp_object(self) -> SessionDocument:
        return self._sdp_object

    def update_ice_parameters(self, ice_parameters: Dict[str, Any]) -> None:
        self._ice_parameters = dict(ice_parameters)

        if ice_parameters.get("iceLite"):
            self._sdp_object["icelite"] = "ice-lite"

        for idx, media_section in enumerate(self._media_sections):
            media_section.set_ice_parameters(ice_parameters)
            self._sdp_object["media"][idx] = media_section.get_object()

    def update_dtls_role(self, role: str) -> None:
        self._dtls_parameters["role"] = role

        for idx, media_section in enumerate(self._media_sections):
            media_section.set_dtls_role(role)
            self._sdp_object["media"][idx] = media_section.get_object()

    def get_next_media_section_idx(self) -> MediaSectionIdx:
        """Index of the first closed section (to reuse), else the next one."""
        for idx, media_section in enumerate(self._media_sections):
            if media_section.closed:
                return MediaSectionIdx(idx, media_section.mid)

        return MediaSectionIdx(len(self._media_sections))

    def send(
        self,
        offer_media_object: MediaObject,
        reuse_mid: str,
        offer_rtp_parameters: RtpParameters,
        answer_rtp_parameters: RtpParameters,
        codec_options: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Answer a local send offer, replacing ``reuse_mid`` if given."""
        media_section = AnswerMediaSection(
            self._ice_parameters,
            self._ice_candidates,
            self._dtls_parameters,
            self._sctp_parameters,
            offer_media_object,
            offer_rtp_parameters,
            answer_rtp_parameters,
            codec_options,
            self._config,
        )

        if reuse_mid:
            self.replace_media_section(media_section, reuse_mid)
        else:
            self.add_media_section(media_section)

    def send_sctp_association(self, offer_media_object: MediaObject) -> None:
        media_section = AnswerMediaSection(
            self._ice_parameters,
            self._ice_candidates,
            self._dtls_parameters,
            self._sctp_parameters,
            offer_media_object,
            {},
            {},
            None,
            self._config,
        )
        self.add_media_section(media_section)

    def recv_sctp_association(self) -> None:
        media_section = OfferMediaSection(
            self._ice_parameters,
            self._ice_candidates,
            self._dtls_parameters,
            self._sctp_parameters,
            "datachannel",
            "application",
            {},
            config=self._config,
        )
        self.add_media_section(media_section)

    def receive(
        self,
        mid: str,
        kind: str,
        offer_rtp_parameters: RtpParameters,
        stream_id: str,
        track_id: str,
    ) -> None:
        """
        Add a remote offer section for media we receive.

        A closed section is recycled if there is one, whatever its kind.
        """
        media_section = OfferMediaSection(
            self._ice_parameters,
            self._ice_candidates,
            self._dtls_parameters,
            None,
            mid,
            kind,
            offer_rtp_parameters,
            stream_id,
            track_id,
            self._config,
        )

        closed_section = next((s for s in self._media_sections if s.closed), None)
        if closed_section is not None:
            self.replace_media_section(media_section, closed_section.mid)
        else:
            self.add_media_section(media_section)

    def disable_media_section(self, mid: str) -> None:
        idx = self._index_of(mid)
        media_section = self._media_sections[idx]

        media_section.disable()
        self._sdp_object["media"][idx] = media_section.get_object()

    def close_media_section(self, mid: str) -> None:
        idx = self._index_of(mid)
        media_section = self._media_sections[idx]

        # Closing the first section would break the bundled transport.
        if mid == self._first_mid:
            logger.debug(f"Disabling first media section {mid!r} instead of closing it")
            media_section.disable()
        else:
            media_section.close()

        self._sdp_object["media"][idx] = media_section.get_object()
        self.regenerate_bundle_mids()

    def get_sdp(self) -> str:
        """Render the session, bumping the o= session version first."""
        self._sdp_object["origin"]["sessionVersion"] += 1
        return write(self._sdp_object)

    def add_media_section(self, new_media_section: MediaSection) -> None:
        if not self._first_mid:
            self._first_mid = new_media_section.mid

        self._media_sections.append(new_media_section)
        self._mid_to_index[new_media_section.mid] = len(self._media_sections) - 1
        self._sdp_object["media"].append(new_media_section.get_object())

        self.regenerate_bundle_mids()

    def replace_media_section(
        self, new_media_section: MediaSection, reuse_mid: str = ""
    ) -> None:
        """Put ``new_media_section`` where ``reuse_mid`` (or its own mid) was."""
        if reuse_mid:
            idx = self._index_of(reuse_mid)
            old_media_section = self._media_sections[idx]

            self._media_sections[idx] = new_media_section
            del self._mid_to_index[old_media_section.mid]
            self._mid_to_index[new_media_section.mid] = idx
            self._sdp_object["media"][idx] = new_media_section.get_object()

            self.regenerate_bundle_mids()
        else:
            idx = self._index_of(new_media_section.mid)

            self._media_sections[idx] = new_media_section
            self._sdp_object["media"][idx] = new_media_section.get_object()

    def regenerate_bundle_mids(self) -> None:
        self._sdp_object["groups"][0]["mids"] = " ".join(
            media_section.mid
            for media_section in self._media_sections
            if not media_section.closed
        )

    def _index_of(self, mid: str) -> int:
        try:
            return self._mid_to_index[mid]
        except KeyError:
            logger.error(f"No media section with mid {mid!r}")
            raise InvalidStateError(f"no media section with mid {mid}") from None


__all__ = ["RemoteSdp"]
