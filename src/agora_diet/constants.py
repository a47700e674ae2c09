"""Reference exchange lists and default bounds used when adapting Diet Designer diets."""

from __future__ import annotations

# Exchanges needed by at least one AGORA reconstruction to produce biomass.
ESSENTIAL_METABOLITES: tuple[str, ...] = (
    "EX_12dgr180(e)",
    "EX_26dap_M(e)",
    "EX_2dmmq8(e)",
    "EX_2obut(e)",
    "EX_3mop(e)",
    "EX_4abz(e)",
    "EX_4hbz(e)",
    "EX_ac(e)",
    "EX_acnam(e)",
    "EX_acgam(e)",
    "EX_acmana(e)",
    "EX_ade(e)",
    "EX_adn(e)",
    "EX_adocbl(e)",
    "EX_adpcbl(e)",
    "EX_ala_D(e)",
    "EX_ala_L(e)",
    "EX_amet(e)",
    "EX_amp(e)",
    "EX_arab_D(e)",
    "EX_arg_L(e)",
    "EX_asn_L(e)",
    "EX_btn(e)",
    "EX_ca2(e)",
    "EX_cbl1(e)",
    "EX_cgly(e)",
    "EX_chor(e)",
    "EX_chsterol(e)",
    "EX_cit(e)",
    "EX_cl(e)",
    "EX_cobalt2(e)",
    "EX_csn(e)",
    "EX_cu2(e)",
    "EX_cys_L(e)",
    "EX_cytd(e)",
    "EX_dad_2(e)",
    "EX_dcyt(e)",
    "EX_ddca(e)",
    "EX_dgsn(e)",
    "EX_fald(e)",
    "EX_fe2(e)",
    "EX_fe3(e)",
    "EX_fol(e)",
    "EX_for(e)",
    "EX_gal(e)",
    "EX_glc_D(e)",
    "EX_gln_L(e)",
    "EX_glu_L(e)",
    "EX_gly(e)",
    "EX_glyc(e)",
    "EX_glyc3p(e)",
    "EX_gsn(e)",
    "EX_gthox(e)",
    "EX_gthrd(e)",
    "EX_gua(e)",
    "EX_h(e)",
    "EX_h2o(e)",
    "EX_h2s(e)",
    "EX_his_L(e)",
    "EX_hxan(e)",
    "EX_ile_L(e)",
    "EX_k(e)",
    "EX_lanost(e)",
    "EX_leu_L(e)",
    "EX_lys_L(e)",
    "EX_malt(e)",
    "EX_met_L(e)",
    "EX_mg2(e)",
    "EX_mn2(e)",
    "EX_mqn7(e)",
    "EX_mqn8(e)",
    "EX_nac(e)",
    "EX_ncam(e)",
    "EX_nmn(e)",
    "EX_no2(e)",
    "EX_ocdca(e)",
    "EX_ocdcea(e)",
    "EX_orn(e)",
    "EX_phe_L(e)",
    "EX_pheme(e)",
    "EX_pi(e)",
    "EX_pnto_R(e)",
    "EX_pro_L(e)",
    "EX_ptrc(e)",
    "EX_pydx(e)",
    "EX_pydxn(e)",
    "EX_q8(e)",
    "EX_rib_D(e)",
    "EX_ribflv(e)",
    "EX_ser_L(e)",
    "EX_sheme(e)",
    "EX_so4(e)",
    "EX_spmd(e)",
    "EX_thm(e)",
    "EX_thr_L(e)",
    "EX_thymd(e)",
    "EX_trp_L(e)",
    "EX_ttdca(e)",
    "EX_tyr_L(e)",
    "EX_ura(e)",
    "EX_val_L(e)",
    "EX_xan(e)",
    "EX_xyl_D(e)",
    "EX_zn2(e)",
)
ESSENTIAL_DEFAULT_LB: float = -0.1

# Dietary compounds the Diet Designer does not map yet.
UNMAPPED_COMPOUNDS: tuple[str, ...] = (
    "EX_asn_L(e)",
    "EX_gln_L(e)",
    "EX_crn(e)",
    "EX_elaid(e)",
    "EX_hdcea(e)",
    "EX_dlnlcg(e)",
    "EX_adrn(e)",
    "EX_hco3(e)",
    "EX_sprm(e)",
    "EX_carn(e)",
    "EX_7thf(e)",
    "EX_Lcystin(e)",
    "EX_hista(e)",
    "EX_orn(e)",
    "EX_ptrc(e)",
    "EX_creat(e)",
    "EX_cytd(e)",
    "EX_so4(e)",
)
UNMAPPED_DEFAULT_LB: float = -50.0

# 396 mg/day in the average American diet (Sahoo et al. 2013).
CHOLESTEROL_ID: str = "EX_chol(e)"
CHOLESTEROL_LB: float = -41.251

# Uptakes below the threshold (mmol/gDW/h) are too tight for community growth.
MICRONUTRIENTS: tuple[str, ...] = (
    "EX_adocbl(e)",
    "EX_vitd2(e)",
    "EX_vitd3(e)",
    "EX_psyl(e)",
    "EX_gum(e)",
    "EX_bglc(e)",
    "EX_phyQ(e)",
    "EX_fol(e)",
    "EX_5mthf(e)",
    "EX_q10(e)",
    "EX_retinol_9_cis(e)",
    "EX_pydxn(e)",
    "EX_pydam(e)",
    "EX_pydx(e)",
    "EX_pheme(e)",
    "EX_ribflv(e)",
    "EX_thm(e)",
    "EX_avite1(e)",
    "EX_pnto_R(e)",
    "EX_na1(e)",
    "EX_cl(e)",
    "EX_k(e)",
    "EX_pi(e)",
    "EX_zn2(e)",
    "EX_cu2(e)",
)
MICRONUTRIENT_THRESHOLD: float = 0.1
MICRONUTRIENT_FACTOR: float = 100.0

# AGORA reconstructions spell adenosylcobalamin differently from the VMH diets.
ID_CORRECTIONS: dict[str, str] = {"EX_adocbl(e)": "EX_adpcbl(e)"}

BIOMASS_PREFIX: str = "biomass"
GROWTH_THRESHOLD: float = 1e-5

# Community upper bound = -fraction * original uptake value.
COMMUNITY_UB_FRACTION: float = 0.8

EXTRACELLULAR_SUFFIX: str = "(e)"
PAIRWISE_SUFFIX: str = "[u]"
COMMUNITY_SUFFIX: str = "[d]"
EXCHANGE_PREFIX: str = "EX_"
COMMUNITY_PREFIX: str = "Diet_EX_"
