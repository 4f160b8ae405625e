from __future__ import annotations

import pytest

CTE_ACCESS_KEY = "35240112345678000199570010000012341000012345"

CTE_OBS = "Carga de eletronicos Ref: FRT2024A entregar no CD principal sem atraso"


def cte_document(
    *,
    v_t_prest: str = "1500.00",
    x_obs: str | None = CTE_OBS,
    dh_emi: str | None = "2024-01-15T10:30:00-03:00",
    n_ct: str | None = "1234",
    uf_ini: str = "SP",
    uf_fim: str = "RJ",
    cfop: str = "6353",
    with_id: bool = True,
    extra: str = "",
) -> str:
    """Build a CT-e processed document with optional pieces left out."""
    id_attr = f' Id="CTe{CTE_ACCESS_KEY}"' if with_id else ""
    n_ct_el = f"<nCT>{n_ct}</nCT>" if n_ct is not None else ""
    dh_emi_el = f"<dhEmi>{dh_emi}</dhEmi>" if dh_emi is not None else ""
    compl = f"<compl><xObs>{x_obs}</xObs></compl>" if x_obs is not None else ""
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<cteProc xmlns="http://www.portalfiscal.inf.br/cte" versao="4.00">
  <CTe>
    <infCte{id_attr} versao="4.00">
      <ide>
        <cUF>35</cUF>
        <CFOP>{cfop}</CFOP>
        <natOp>PRESTACAO DE SERVICO DE TRANSPORTE</natOp>
        {n_ct_el}
        {dh_emi_el}
        <UFIni>{uf_ini}</UFIni>
        <UFFim>{uf_fim}</UFFim>
      </ide>
      {compl}
      <emit>
        <CNPJ>12345678000199</CNPJ>
        <xNome>TRANSPORTADORA ACME LTDA</xNome>
      </emit>
      <dest>
        <CNPJ>98765432000111</CNPJ>
        <xNome>CLIENTE BETA SA</xNome>
      </dest>
      <vPrest>
        <vTPrest>{v_t_prest}</vTPrest>
        <vRec>{v_t_prest}</vRec>
      </vPrest>
    </infCte>
  </CTe>
  <protCTe versao="4.00">
    <infProt>
      <chCTe>{CTE_ACCESS_KEY}</chCTe>
    </infProt>
  </protCTe>
  {extra}
</cteProc>
"""


def nfse_document(
    *,
    valor_servicos: str = "2500.50",
    discriminacao: str | None = "Servico de manutencao preventiva da frota",
    data_emissao: str | None = "2024-03-10T14:22:00",
    numero: str | None = "2024000123",
) -> str:
    """Build an ABRASF-style NFS-e document with optional pieces left out."""
    numero_el = f"<Numero>{numero}</Numero>" if numero is not None else ""
    data_el = f"<DataEmissao>{data_emissao}</DataEmissao>" if data_emissao is not None else ""
    disc_el = (
        f"<Discriminacao>{discriminacao}</Discriminacao>" if discriminacao is not None else ""
    )
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<CompNfse xmlns="http://www.abrasf.org.br/nfse.xsd">
  <Nfse versao="2.03">
    <InfNfse>
      {numero_el}
      {data_el}
      <Servico>
        <Valores>
          <ValorServicos>{valor_servicos}</ValorServicos>
        </Valores>
        {disc_el}
      </Servico>
      <PrestadorServico>
        <IdentificacaoPrestador>
          <CpfCnpj><Cnpj>11222333000144</Cnpj></CpfCnpj>
        </IdentificacaoPrestador>
        <RazaoSocial>OFICINA GAMA LTDA</RazaoSocial>
      </PrestadorServico>
      <TomadorServico>
        <IdentificacaoTomador>
          <CpfCnpj><Cnpj>12345678000199</Cnpj></CpfCnpj>
        </IdentificacaoTomador>
        <RazaoSocial>TRANSPORTADORA ACME LTDA</RazaoSocial>
      </TomadorServico>
    </InfNfse>
  </Nfse>
</CompNfse>
"""


@pytest.fixture
def cte_xml() -> str:
    return cte_document()


@pytest.fixture
def nfse_xml() -> str:
    return nfse_document()


@pytest.fixture
def cte_file(tmp_path, cte_xml):
    path = tmp_path / "cte.xml"
    path.write_text(cte_xml, encoding="utf-8")
    return path


@pytest.fixture
def nfse_file(tmp_path, nfse_xml):
    path = tmp_path / "nfse.xml"
    path.write_text(nfse_xml, encoding="utf-8")
    return path


@pytest.fixture
def empty_config_dir(tmp_path, monkeypatch):
    """Point the config dir at an empty directory so defaults apply."""
    cfg = tmp_path / "config"
    cfg.mkdir()
    monkeypatch.setenv("IMPORTADOR_CONFIG_DIR", str(cfg))
    return cfg
