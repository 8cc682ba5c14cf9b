# -*- coding: utf-8 -*-
"""
DOCX 패키지 로드/저장 모듈

개요:
- DocxPackage: zip 컨테이너를 읽어 word/document.xml 을 ElementTree 로 노출하고,
  작업이 끝나면 본문 파트만 교체하여 다시 압축
  (DocxPackage.new: 최소 구성의 빈 문서)
- DocumentTree: 본문 트리 래퍼 (표 목록, 부모/형제 탐색, 노드 삽입/삭제)

사용 예:
    pkg = DocxPackage.from_file("report.docx")
    for tbl in pkg.tree.tables():
        ...
    pkg.save("report_fixed.docx")
"""

import logging
import re
import zipfile
import xml.etree.ElementTree as ET
from io import BytesIO
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from ..errors import DocxStructureError
from .elements import W_P, W_TBL, local_name, paragraph_text, w


logger = logging.getLogger(__name__)

MAIN_DOCUMENT_PART = 'word/document.xml'
DOCX_MEDIA_TYPE = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\r\n'

CONTENT_TYPES_PART = '[Content_Types].xml'
ROOT_RELS_PART = '_rels/.rels'

# 새 문서용 최소 구성 파트
_CONTENT_TYPES_XML = (
    XML_DECLARATION
    + '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
    '<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
    '<Default Extension="xml" ContentType="application/xml"/>'
    '<Override PartName="/word/document.xml"'
    ' ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>'
    '</Types>'
).encode('utf-8')
_ROOT_RELS_XML = (
    XML_DECLARATION
    + '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
    '<Relationship Id="rId1"'
    ' Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument"'
    ' Target="word/document.xml"/>'
    '</Relationships>'
).encode('utf-8')
_BLANK_DOCUMENT_XML = (
    XML_DECLARATION
    + '<w:document'
    ' xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main"'
    ' xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships">'
    '<w:body><w:sectPr/></w:body></w:document>'
).encode('utf-8')

# ElementTree 가 예약한 접두사 (ns0, ns1 ...)
_RESERVED_PREFIX_RE = re.compile(r'ns\d+\.?$')
_XMLNS_DECL_RE = re.compile(r'xmlns(?::([\w.\-]+))?="')


class DocumentTree:
    """
    본문 XML 트리

    ElementTree 요소에는 부모 참조가 없으므로 부모 맵을 캐시하고,
    구조 변경(삽입/삭제) 시 캐시를 무효화합니다.
    """

    def __init__(self, root: ET.Element):
        self.root = root
        self._parents: Optional[Dict[ET.Element, ET.Element]] = None

    @property
    def body(self) -> ET.Element:
        """w:body 요소 (없으면 루트)"""
        body = self.root.find(w('body'))
        return body if body is not None else self.root

    def tables(self) -> List[ET.Element]:
        """문서 순서의 모든 표 (중첩 표 포함)"""
        return list(self.root.iter(W_TBL))

    def paragraphs(self) -> List[ET.Element]:
        """문서 순서의 모든 문단 (표 안의 문단 포함)"""
        return list(self.root.iter(W_P))

    # ========== 부모/형제 탐색 ==========

    def invalidate(self):
        """부모 맵 캐시 무효화"""
        self._parents = None

    def parent(self, elem: ET.Element) -> Optional[ET.Element]:
        """요소의 부모 (트리에서 분리된 요소면 None)"""
        if self._parents is None:
            self._parents = {child: parent for parent in self.root.iter() for child in parent}
        return self._parents.get(elem)

    def contains(self, elem: ET.Element) -> bool:
        """요소가 아직 트리에 붙어 있는지 확인"""
        return elem is self.root or self.parent(elem) is not None

    def next_siblings(self, elem: ET.Element) -> Iterator[ET.Element]:
        """뒤따르는 형제 요소들"""
        parent = self.parent(elem)
        if parent is None:
            return iter(())
        children = list(parent)
        idx = children.index(elem)
        return iter(children[idx + 1:])

    # ========== 구조 변경 ==========

    def insert_after(self, elem: ET.Element, new_elem: ET.Element):
        """elem 바로 뒤에 new_elem 삽입"""
        parent = self.parent(elem)
        if parent is None:
            raise DocxStructureError(f"부모가 없는 요소 뒤에 삽입할 수 없습니다: {local_name(elem.tag)}")
        idx = list(parent).index(elem)
        parent.insert(idx + 1, new_elem)
        self.invalidate()

    def remove(self, elem: ET.Element):
        """요소 제거 (이미 분리된 요소면 무시)"""
        parent = self.parent(elem)
        if parent is None:
            return
        parent.remove(elem)
        self.invalidate()

    def replace_children(self, parent: ET.Element, keep: int, new_children: List[ET.Element]):
        """parent 의 처음 keep 개 자식만 남기고 나머지를 new_children 로 교체"""
        for child in list(parent)[keep:]:
            parent.remove(child)
        parent.extend(new_children)
        self.invalidate()

    def append_block(self, elem: ET.Element) -> ET.Element:
        """본문 끝(마지막 sectPr 앞)에 블록 요소 추가"""
        body = self.body
        children = list(body)
        idx = len(children)
        if children and children[-1].tag == w('sectPr'):
            idx -= 1
        body.insert(idx, elem)
        self.invalidate()
        return elem


class DocxPackage:
    """DOCX zip 컨테이너"""

    def __init__(
        self,
        entries: List[Tuple[zipfile.ZipInfo, bytes]],
        main_xml: bytes,
        comment: bytes = b'',
        source_name: str = '',
    ):
        """
        Args:
            entries: 원본 zip 항목 (ZipInfo, 내용) 목록, 원본 순서 유지
            main_xml: word/document.xml 원본 바이트
            comment: zip 아카이브 주석
            source_name: 원본 파일명 (출력 파일명 생성용)
        """
        self.entries = entries
        self.comment = comment
        self.source_name = source_name
        self._original_xml = main_xml
        self._root_namespaces = self._collect_root_namespaces(main_xml)

        try:
            root = ET.fromstring(main_xml)
        except ET.ParseError as e:
            raise DocxStructureError(f"본문 XML 파싱 실패: {e}") from e

        self.tree = DocumentTree(root)
        self._baseline = ET.tostring(root)

    # ========== 로드 ==========

    @classmethod
    def from_bytes(cls, data: bytes, source_name: str = '') -> 'DocxPackage':
        """메모리의 DOCX 바이트에서 로드"""
        try:
            zf = zipfile.ZipFile(BytesIO(data), 'r')
        except zipfile.BadZipFile as e:
            raise DocxStructureError(f"DOCX(zip) 파일이 아닙니다: {source_name or '<bytes>'}") from e

        with zf:
            if MAIN_DOCUMENT_PART not in zf.namelist():
                raise DocxStructureError(f"본문 파트({MAIN_DOCUMENT_PART})가 없습니다: {source_name or '<bytes>'}")
            entries = [(info, zf.read(info.filename)) for info in zf.infolist()]
            comment = zf.comment

        main_xml = next(content for info, content in entries if info.filename == MAIN_DOCUMENT_PART)
        return cls(entries, main_xml, comment=comment, source_name=source_name)

    @classmethod
    def new(cls, source_name: str = '') -> 'DocxPackage':
        """빈 문서 (본문에 sectPr 하나, 스타일 파트 없음)"""
        entries = []
        for name, content in (
            (CONTENT_TYPES_PART, _CONTENT_TYPES_XML),
            (ROOT_RELS_PART, _ROOT_RELS_XML),
            (MAIN_DOCUMENT_PART, _BLANK_DOCUMENT_XML),
        ):
            info = zipfile.ZipInfo(name, date_time=(1980, 1, 1, 0, 0, 0))
            info.compress_type = zipfile.ZIP_DEFLATED
            entries.append((info, content))
        return cls(entries, _BLANK_DOCUMENT_XML, source_name=source_name)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'DocxPackage':
        """DOCX 파일에서 로드"""
        path = Path(path)
        return cls.from_bytes(path.read_bytes(), source_name=path.name)

    @staticmethod
    def _collect_root_namespaces(xml_content: bytes) -> Dict[str, str]:
        """루트 요소에 선언된 접두사 -> URI (ElementTree 접두사로도 등록)"""
        namespaces: Dict[str, str] = {}
        try:
            for event, item in ET.iterparse(BytesIO(xml_content), events=('start-ns', 'start')):
                if event == 'start':
                    break
                prefix, uri = item
                namespaces[prefix] = uri
        except ET.ParseError:
            return namespaces

        for prefix, uri in namespaces.items():
            if prefix and not _RESERVED_PREFIX_RE.match(prefix):
                ET.register_namespace(prefix, uri)
        return namespaces

    # ========== 저장 ==========

    def is_modified(self) -> bool:
        """트리가 로드 이후 변경되었는지 확인"""
        return ET.tostring(self.tree.root) != self._baseline

    def main_xml_bytes(self) -> bytes:
        """현재 트리의 본문 XML (변경이 없으면 원본 바이트 그대로)"""
        if not self.is_modified():
            return self._original_xml

        body = ET.tostring(self.tree.root, encoding='unicode')
        body = self._restore_namespace_declarations(body)
        return (XML_DECLARATION + body).encode('utf-8')

    def _restore_namespace_declarations(self, xml_text: str) -> str:
        """ElementTree 가 생략한 루트 네임스페이스 선언 복원 (mc:Ignorable 참조 보존)"""
        tag_end = xml_text.find('>')
        if tag_end == -1:
            return xml_text
        if xml_text[tag_end - 1] == '/':
            tag_end -= 1

        start_tag = xml_text[:tag_end]
        declared = {m.group(1) or '' for m in _XMLNS_DECL_RE.finditer(start_tag)}

        missing = []
        for prefix, uri in self._root_namespaces.items():
            if prefix not in declared:
                attr = f'xmlns:{prefix}' if prefix else 'xmlns'
                missing.append(f'{attr}="{uri}"')

        if not missing:
            return xml_text
        return start_tag + ' ' + ' '.join(missing) + xml_text[tag_end:]

    def to_bytes(self) -> bytes:
        """DOCX 바이트 생성 (본문 파트만 교체, 나머지 항목은 원본 그대로)"""
        main_xml = self.main_xml_bytes()
        output = BytesIO()
        with zipfile.ZipFile(output, 'w') as zout:
            zout.comment = self.comment
            for info, content in self.entries:
                data = main_xml if info.filename == MAIN_DOCUMENT_PART else content
                zout.writestr(info, data, compress_type=info.compress_type)
        return output.getvalue()

    def save(self, output_path: Union[str, Path]) -> Path:
        """DOCX 파일로 저장"""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(self.to_bytes())
        logger.info("저장 완료: %s", output_path)
        return output_path

    # ========== 내용 추출 ==========

    def paragraph_texts(self) -> List[str]:
        """본문 문단 텍스트 (문서 순서, 빈 문단 제외)"""
        texts = []
        for p in self.tree.paragraphs():
            text = paragraph_text(p)
            if text.strip():
                texts.append(text)
        return texts

    def raw_text(self) -> str:
        """문단 텍스트를 줄바꿈으로 연결"""
        return '\n'.join(self.paragraph_texts())
